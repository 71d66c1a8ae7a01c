from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import OvertimeStatus

OPEN_STATUSES = (OvertimeStatus.PENDING, OvertimeStatus.CONFIRMED)


@dataclass(frozen=True)
class OvertimeRequest:
    """Prompt asking an employee still clocked in after shift end to confirm overtime."""

    request_id: Optional[int]
    employee_id: int
    attendance_id: int
    work_date: date
    scheduled_check_out: datetime
    prompt_sent_at: datetime
    status: OvertimeStatus = OvertimeStatus.PENDING
    overtime_hours: Optional[float] = None
    responded_at: Optional[datetime] = None
    auto_checkout_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def to_dict(self) -> dict:
        return {
            "requestId": self.request_id,
            "attendanceId": self.attendance_id,
            "date": self.work_date.isoformat(),
            "scheduledCheckOut": self.scheduled_check_out.isoformat(),
            "promptSentAt": self.prompt_sent_at.isoformat(),
            "status": self.status.value,
            "overtimeHours": self.overtime_hours,
            "respondedAt": self.responded_at.isoformat() if self.responded_at else None,
        }

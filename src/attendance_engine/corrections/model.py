from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, CorrectionStatus, CorrectionType


@dataclass(frozen=True)
class AttendanceCorrection:
    """An employee's request to fix one day's attendance, reviewed by HR or their manager."""

    correction_id: Optional[int]
    employee_id: int
    attendance_id: int
    work_date: date
    correction_type: CorrectionType
    reason: str
    created_at: datetime
    requested_check_in: Optional[datetime] = None
    requested_check_out: Optional[datetime] = None
    requested_status: Optional[AttendanceStatus] = None
    status: CorrectionStatus = CorrectionStatus.PENDING
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    reviewer_comments: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "correctionId": self.correction_id,
            "employeeId": self.employee_id,
            "attendanceId": self.attendance_id,
            "date": self.work_date.isoformat(),
            "correctionType": self.correction_type.value,
            "requestedCheckIn": self.requested_check_in.isoformat() if self.requested_check_in else None,
            "requestedCheckOut": self.requested_check_out.isoformat() if self.requested_check_out else None,
            "requestedStatus": self.requested_status.value if self.requested_status else None,
            "reason": self.reason,
            "status": self.status.value,
            "reviewedBy": self.reviewed_by,
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "reviewerComments": self.reviewer_comments,
        }

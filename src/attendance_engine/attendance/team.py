from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..employees.model import Employee
from ..settings.model import ResolvedSettings
from .model import AttendanceRecord

# Labels for employees who have no record yet today.
DAY_OFF = "day-off"
NOT_STARTED = "not-started"
NOT_CHECKED_IN = "not-checked-in"


def pending_status(now: datetime, settings: ResolvedSettings, *, working_day: bool) -> str:
    """Status shown for someone without a record, by where `now` sits in the working day."""
    if not working_day:
        return DAY_OFF
    today = settings.today(now)
    if now < settings.start_at(today):
        return NOT_STARTED
    if now >= settings.absent_after(today):
        return AttendanceStatus.ABSENT.value
    return NOT_CHECKED_IN


@dataclass(frozen=True)
class TeamMemberDay:
    employee: Employee
    status: str
    record: Optional[AttendanceRecord] = None

    def to_dict(self) -> dict:
        record = self.record
        return {
            "employeeId": self.employee.employee_id,
            "firstName": self.employee.first_name,
            "lastName": self.employee.last_name,
            "departmentId": self.employee.department_id,
            "status": self.status,
            "checkIn": record.check_in.isoformat() if record and record.check_in else None,
            "checkOut": record.check_out.isoformat() if record and record.check_out else None,
            "workHours": record.work_hours if record else 0.0,
        }


@dataclass(frozen=True)
class TeamToday:
    members: Sequence[TeamMemberDay]

    def count(self, *statuses: str) -> int:
        return sum(1 for m in self.members if m.status in statuses)

    def meta(self) -> dict:
        return {
            "total": len(self.members),
            "present": self.count(AttendanceStatus.PRESENT.value, AttendanceStatus.IN_PROGRESS.value),
            "halfDay": self.count(AttendanceStatus.HALF_DAY.value),
            "absent": self.count(AttendanceStatus.ABSENT.value),
            "onLeave": self.count(AttendanceStatus.ON_LEAVE.value),
            "notCheckedIn": self.count(NOT_CHECKED_IN),
        }

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class ApprovedLeave:
    """An approved leave or work-from-home period (dates inclusive)."""

    leave_id: int
    employee_id: int
    start_date: date
    end_date: date
    work_from_home: bool = False

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    name: str
    start_date: date
    end_date: date
    company_id: Optional[int] = None
    is_active: bool = True

    def covers(self, day: date) -> bool:
        return self.is_active and self.start_date <= day <= self.end_date

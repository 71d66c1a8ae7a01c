from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ApprovedLeave, Holiday


class LeaveRepository(Protocol):
    def get_approved_for(self, employee_id: int, day: date) -> Optional[ApprovedLeave]:
        raise NotImplementedError

    def list_approved_on(self, day: date) -> Sequence[ApprovedLeave]:
        raise NotImplementedError


class HolidayRepository(Protocol):
    def get_active_on(self, day: date, *, company_id: Optional[int] = None) -> Optional[Holiday]:
        """Company-wide holidays (company_id NULL) always apply; company ones only to that company."""

        raise NotImplementedError

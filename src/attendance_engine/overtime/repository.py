from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import OvertimeStatus
from .model import OvertimeRequest


class OvertimeRepository(Protocol):
    def create(self, request: OvertimeRequest) -> OvertimeRequest:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[OvertimeRequest]:
        raise NotImplementedError

    def get_open_for_attendance(self, attendance_id: int) -> Optional[OvertimeRequest]:
        """The pending or overtime-confirmed request tied to an attendance record."""

        raise NotImplementedError

    def transition(
        self,
        request_id: int,
        *,
        from_statuses: Iterable[OvertimeStatus],
        to_status: OvertimeStatus,
        overtime_hours: Optional[float] = None,
        responded_at: Optional[datetime] = None,
        auto_checkout_at: Optional[datetime] = None,
    ) -> bool:
        """Conditional status change; False when the request is no longer in `from_statuses`."""

        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[OvertimeStatus] = None,
        limit: int = 10,
    ) -> Sequence[OvertimeRequest]:
        raise NotImplementedError

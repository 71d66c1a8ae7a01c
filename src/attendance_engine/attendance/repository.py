from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, CheckInStatus
from .model import AttendanceClosure, AttendanceRecord, LocationStamp


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Store a new record and return it with its id.

        Raises DuplicateAttendanceError when (employee_id, work_date) already exists.
        """

        raise NotImplementedError

    def record_check_in(
        self,
        *,
        attendance_id: int,
        check_in: datetime,
        check_in_status: CheckInStatus,
        work_from_home: bool,
        geofence_validated: bool,
        location: Optional[LocationStamp] = None,
        status_reason: Optional[str] = None,
    ) -> bool:
        """Clock in on an existing record that has no check-in yet (leave/WFH/absent placeholder).
        The placeholder's status reason is replaced by `status_reason`.

        Conditional: returns False when the record already has a check-in.
        """

        raise NotImplementedError

    def close_if_in_progress(self, attendance_id: int, closure: AttendanceClosure) -> bool:
        """Atomic conditional close.

        Applies only while status is in-progress and check_out is empty; returns
        False (a lost race) otherwise.
        """

        raise NotImplementedError

    def list_in_progress(
        self,
        *,
        work_date: Optional[date] = None,
        before: Optional[date] = None,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def employee_ids_with_record(self, work_date: date) -> set[int]:
        raise NotImplementedError

    def list_for_date(self, work_date: date, employee_ids: Iterable[int]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        status: AttendanceStatus,
        status_reason: Optional[str],
        work_hours: float,
        total_logged_hours: float,
        break_minutes: int,
        shrinkage_percentage: float,
        remark: Optional[str] = None,
    ) -> bool:
        """Override used after an approved correction; marks the record as a manual entry."""

        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

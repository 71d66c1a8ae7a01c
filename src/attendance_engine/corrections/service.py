from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..attendance.evaluation import WorkdayEvaluator
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import at_local, ensure_aware, now_utc, parse_hhmm
from ..common.validators import require_non_empty
from ..core.enums import AttendanceStatus, CorrectionStatus, CorrectionType
from ..core.exceptions import (
    AuthorizationError,
    DuplicateAttendanceError,
    EmployeeNotFound,
    RecordNotFound,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..settings.service import SettingsService
from .model import AttendanceCorrection
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)


class CorrectionService:
    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        settings: SettingsService,
        *,
        evaluator: WorkdayEvaluator | None = None,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._evaluator = evaluator or WorkdayEvaluator()

    def _employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(int(employee_id))
        return employee

    @staticmethod
    def _parse_status(value: Optional[str]) -> Optional[AttendanceStatus]:
        v = (value or "").strip()
        if not v:
            return None
        try:
            status = AttendanceStatus(v)
        except ValueError:
            raise ValidationError(f"Unknown attendance status: {v}")
        if status == AttendanceStatus.IN_PROGRESS:
            raise ValidationError("A correction cannot set a record back to in-progress")
        return status

    def _ensure_record(self, employee: Employee, work_date: date, correction_type: CorrectionType) -> AttendanceRecord:
        record = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if record:
            return record
        if correction_type != CorrectionType.MISSING_ENTRY:
            raise RecordNotFound("No attendance record for this date")
        placeholder = AttendanceRecord(
            attendance_id=None,
            employee_id=employee.employee_id,
            work_date=work_date,
            status=AttendanceStatus.ABSENT,
            status_reason="No attendance recorded (missing-entry correction submitted)",
            is_manual_entry=True,
        )
        try:
            return self._attendance.create(placeholder)
        except DuplicateAttendanceError:
            return self._attendance.get_for_employee_and_date(employee.employee_id, work_date)

    def submit(
        self,
        employee_id: int,
        *,
        work_date: date,
        correction_type: CorrectionType,
        reason: str,
        requested_check_in: Optional[str] = None,
        requested_check_out: Optional[str] = None,
        requested_status: Optional[str] = None,
        now: datetime | None = None,
    ) -> AttendanceCorrection:
        now = ensure_aware(now or now_utc())
        employee = self._employee(employee_id)
        settings = self._settings.for_employee(employee)
        reason = require_non_empty(reason, "Reason")

        if work_date > settings.today(now):
            raise ValidationError("Cannot request a correction for a future date")

        check_in = at_local(work_date, parse_hhmm(requested_check_in), settings.timezone) if requested_check_in else None
        check_out = at_local(work_date, parse_hhmm(requested_check_out), settings.timezone) if requested_check_out else None
        status = self._parse_status(requested_status)
        if check_in is None and check_out is None and status is None:
            raise ValidationError("Please request at least one change")
        if check_in and check_out and check_out < check_in:
            raise ValidationError("Requested check-out cannot be before check-in")

        record = self._ensure_record(employee, work_date, correction_type)
        if self._corrections.get_pending_for_attendance(record.attendance_id):
            raise ValidationError("A correction request is already pending for this day")

        created = self._corrections.create(
            AttendanceCorrection(
                correction_id=None,
                employee_id=employee.employee_id,
                attendance_id=record.attendance_id,
                work_date=work_date,
                correction_type=correction_type,
                reason=reason,
                created_at=now,
                requested_check_in=check_in,
                requested_check_out=check_out,
                requested_status=status,
            )
        )
        logger.info("Employee %s submitted correction %s for %s", employee.employee_id, created.correction_id, work_date)
        return created

    def _authorize_reviewer(self, reviewer: Employee, target: Employee) -> None:
        if reviewer.has_org_wide_access:
            return
        if target.reporting_manager_id is not None and target.reporting_manager_id == reviewer.employee_id:
            return
        raise AuthorizationError("You are not allowed to review this correction")

    def _pending(self, correction_id: int) -> AttendanceCorrection:
        correction = self._corrections.get_by_id(int(correction_id))
        if not correction:
            raise RecordNotFound("Correction request not found")
        if correction.status != CorrectionStatus.PENDING:
            raise ValidationError("Correction request has already been reviewed")
        return correction

    def approve(
        self,
        reviewer_id: int,
        correction_id: int,
        *,
        comments: str = "",
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = ensure_aware(now or now_utc())
        reviewer = self._employee(reviewer_id)
        correction = self._pending(correction_id)
        target = self._employee(correction.employee_id)
        self._authorize_reviewer(reviewer, target)

        record = self._attendance.get_by_id(correction.attendance_id)
        if not record:
            raise RecordNotFound("Attendance record for this correction no longer exists")

        settings = self._settings.for_employee(target)
        check_in = correction.requested_check_in or record.check_in
        check_out = correction.requested_check_out or record.check_out
        if check_in and check_out and check_out < check_in:
            raise ValidationError("Check-out cannot be before check-in")

        status = correction.requested_status or record.status
        status_reason = record.status_reason
        work_hours = record.work_hours
        total_logged_hours = record.total_logged_hours
        break_minutes = record.break_minutes
        shrinkage = record.shrinkage_percentage
        if check_in and check_out:
            evaluation = self._evaluator.evaluate(check_in, check_out, settings)
            status = correction.requested_status or evaluation.status
            status_reason = evaluation.classification.reason
            work_hours = evaluation.hours.effective_work_hours
            total_logged_hours = evaluation.hours.total_logged_hours
            break_minutes = evaluation.hours.break_minutes
            shrinkage = evaluation.hours.shrinkage_percentage
        if correction.requested_status:
            status_reason = f"Set to {status.value} by approved correction"

        remark = f"Corrected on {settings.today(now).isoformat()} - {correction.reason}"
        ok = self._attendance.admin_update_record(
            attendance_id=record.attendance_id,
            check_in=check_in,
            check_out=check_out,
            status=status,
            status_reason=status_reason,
            work_hours=work_hours,
            total_logged_hours=total_logged_hours,
            break_minutes=break_minutes,
            shrinkage_percentage=shrinkage,
            remark=remark,
        )
        if not ok:
            raise ValidationError("Failed to update the attendance record")

        decided = self._corrections.decide(
            correction.correction_id,
            status=CorrectionStatus.APPROVED,
            reviewed_by=reviewer.employee_id,
            reviewed_at=now,
            comments=(comments or "").strip() or None,
        )
        if not decided:
            raise ValidationError("Correction request has already been reviewed")
        logger.info("Correction %s approved by %s", correction.correction_id, reviewer.employee_id)
        return self._attendance.get_by_id(record.attendance_id)

    def reject(
        self,
        reviewer_id: int,
        correction_id: int,
        *,
        comments: str = "",
        now: datetime | None = None,
    ) -> None:
        now = ensure_aware(now or now_utc())
        reviewer = self._employee(reviewer_id)
        correction = self._pending(correction_id)
        self._authorize_reviewer(reviewer, self._employee(correction.employee_id))

        decided = self._corrections.decide(
            correction.correction_id,
            status=CorrectionStatus.REJECTED,
            reviewed_by=reviewer.employee_id,
            reviewed_at=now,
            comments=(comments or "").strip() or None,
        )
        if not decided:
            raise ValidationError("Correction request has already been reviewed")
        logger.info("Correction %s rejected by %s", correction.correction_id, reviewer.employee_id)

    def list_for_employee(self, employee_id: int, *, status: Optional[CorrectionStatus] = None) -> Sequence[AttendanceCorrection]:
        return self._corrections.list_corrections(employee_id=int(employee_id), status=status)

    def list_pending(self, reviewer_id: int) -> Sequence[AttendanceCorrection]:
        """Pending corrections the reviewer is allowed to decide."""
        reviewer = self._employee(reviewer_id)
        pending = self._corrections.list_corrections(status=CorrectionStatus.PENDING)
        if reviewer.has_org_wide_access:
            return pending
        visible = []
        for correction in pending:
            target = self._employees.get_by_id(correction.employee_id)
            if target and target.reporting_manager_id == reviewer.employee_id:
                visible.append(correction)
        return visible

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.evaluation import WorkdayEvaluator
from ..attendance.factory import AttendanceStrategyFactory
from ..attendance.model import AttendanceRecord
from ..attendance.notices import clock_out_effects
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import ensure_aware, now_utc
from ..core.constants import DEFAULT_OVERTIME_LIST_LIMIT
from ..core.enums import OvertimeStatus
from ..core.exceptions import AlreadyClockedOut, EmployeeNotFound, RecordNotFound, ValidationError
from ..employees.repository import EmployeeRepository
from ..notifications.effects import Effect
from ..settings.service import SettingsService
from .model import OvertimeRequest
from .repository import OvertimeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OvertimeResponse:
    request: OvertimeRequest
    record: Optional[AttendanceRecord] = None
    effects: Sequence[Effect] = field(default_factory=tuple)


class OvertimeService:
    def __init__(
        self,
        overtime: OvertimeRepository,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        settings: SettingsService,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        evaluator: WorkdayEvaluator | None = None,
    ):
        self._overtime = overtime
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._evaluator = evaluator or WorkdayEvaluator()

    def respond(
        self,
        employee_id: int,
        request_id: int,
        *,
        is_working_overtime: bool,
        now: datetime | None = None,
    ) -> OvertimeResponse:
        """Answer an overtime prompt.

        Confirming keeps the employee clocked in; overtime is counted at their
        real clock-out. Declining clocks them out now.
        """
        now = ensure_aware(now or now_utc())

        request = self._overtime.get_by_id(int(request_id))
        if not request or request.employee_id != int(employee_id):
            raise RecordNotFound("Overtime request not found")
        if request.status != OvertimeStatus.PENDING:
            raise ValidationError("This overtime request has already been answered")

        if is_working_overtime:
            ok = self._overtime.transition(
                request.request_id,
                from_statuses=(OvertimeStatus.PENDING,),
                to_status=OvertimeStatus.CONFIRMED,
                responded_at=now,
            )
            if not ok:
                raise ValidationError("This overtime request has already been answered")
            logger.info("Employee %s confirmed overtime (request %s)", employee_id, request.request_id)
            return OvertimeResponse(request=self._overtime.get_by_id(request.request_id))

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(int(employee_id))
        record = self._attendance.get_by_id(request.attendance_id)
        if not record or not record.is_open:
            raise AlreadyClockedOut()

        settings = self._settings.for_employee(employee)
        check_out = max(now, record.check_in)
        strategy = self._factory.for_checkout(now=check_out, work_date=record.work_date, settings=settings)
        decision = strategy.decide_checkout(now=check_out, work_date=record.work_date, settings=settings)
        closure = self._evaluator.closure(
            check_in=record.check_in,
            check_out=check_out,
            check_out_status=decision.status,
            settings=settings,
            reason_suffix=decision.reason_suffix,
            remark="Clocked out from overtime prompt",
        )
        if not self._attendance.close_if_in_progress(record.attendance_id, closure):
            raise AlreadyClockedOut()

        self._overtime.transition(
            request.request_id,
            from_statuses=(OvertimeStatus.PENDING,),
            to_status=OvertimeStatus.MANUAL_CHECKOUT,
            responded_at=now,
        )
        closed = self._attendance.get_by_id(record.attendance_id)
        logger.info("Employee %s declined overtime and was clocked out", employee_id)
        return OvertimeResponse(
            request=self._overtime.get_by_id(request.request_id),
            record=closed,
            effects=tuple(clock_out_effects(employee, closed, settings)),
        )

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[OvertimeStatus] = OvertimeStatus.PENDING,
        limit: int = DEFAULT_OVERTIME_LIST_LIMIT,
    ) -> Sequence[OvertimeRequest]:
        return self._overtime.list_for_employee(int(employee_id), status=status, limit=int(limit))

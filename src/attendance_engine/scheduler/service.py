from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, FrozenSet, Optional, Sequence

from ..attendance.evaluation import WorkdayEvaluator
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import ensure_aware, iter_days, now_utc, same_minute, to_local
from ..core import constants
from ..core.enums import AttendanceStatus, CheckOutStatus, OvertimeStatus
from ..core.exceptions import DuplicateAttendanceError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..notifications import messages
from ..notifications.effects import EffectDispatcher, PushNotification
from ..overtime.model import OvertimeRequest
from ..overtime.repository import OvertimeRepository
from ..settings.model import ResolvedSettings
from ..settings.service import SettingsService
from ..workcalendar.repository import HolidayRepository, LeaveRepository

logger = logging.getLogger(__name__)

AUTO_CHECKOUT_REMARK = (
    "Auto-checked out 2 hours after scheduled logout time. Overtime not counted. "
    "Raise correction request if needed."
)
AUTO_CHECKOUT_REASON = "(Auto-checkout at scheduled time)"
PAST_DAY_REASON = "(Auto-corrected: Past day incomplete)"


@dataclass
class SchedulerContext:
    """One settings scope (global or a company with overrides) for a single tick."""

    settings: ResolvedSettings
    employees: Dict[int, Employee]
    now: datetime
    overridden: FrozenSet[int] = frozenset()

    @property
    def company_id(self) -> Optional[int]:
        return self.settings.company_id

    def covers(self, company_id: Optional[int]) -> bool:
        """True when employees of `company_id` are scheduled under this context."""
        if self.company_id is None:
            return company_id not in self.overridden
        return company_id == self.company_id

    @property
    def local_now(self) -> datetime:
        return to_local(self.now, self.settings.timezone)

    @property
    def today(self) -> date:
        return self.local_now.date()

    def at(self, moment: datetime) -> bool:
        """True during the minute in which `moment` falls."""
        return same_minute(self.now, moment)


@dataclass
class TickReport:
    counts: Counter = field(default_factory=Counter)
    failures: Counter = field(default_factory=Counter)

    def bump(self, name: str, n: int = 1) -> None:
        if n:
            self.counts[name] += n

    def failed(self, name: str) -> None:
        self.failures[name] += 1

    def to_dict(self) -> dict:
        return {"counts": dict(self.counts), "failures": dict(self.failures)}


class NotificationScheduler:
    """Minute-tick attendance scheduler.

    Every pass re-derives what to do from stored records, so a tick can be
    repeated or skipped safely. Record mutations go through conditional
    updates and lose gracefully to a concurrent clock-out.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        settings: SettingsService,
        leaves: LeaveRepository,
        holidays: HolidayRepository,
        overtime: OvertimeRepository,
        dispatcher: EffectDispatcher,
        *,
        evaluator: WorkdayEvaluator | None = None,
        rng: random.Random | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._leaves = leaves
        self._holidays = holidays
        self._overtime = overtime
        self._dispatcher = dispatcher
        self._evaluator = evaluator or WorkdayEvaluator()
        self._rng = rng or random.Random()

    # ---- context ----

    def build_contexts(self, now: datetime) -> list[SchedulerContext]:
        contexts = self._settings.list_contexts()
        overridden = frozenset(c.company_id for c in contexts if c.company_id is not None)
        active = list(self._employees.list_active())

        result = []
        for settings in contexts:
            ctx = SchedulerContext(settings=settings, employees={}, now=now, overridden=overridden)
            ctx.employees = {e.employee_id: e for e in active if ctx.covers(e.company_id)}
            result.append(ctx)
        return result

    # ---- entry points ----

    def tick(self, now: datetime | None = None) -> TickReport:
        now = ensure_aware(now or now_utc())
        report = TickReport()

        for ctx in self.build_contexts(now):
            passes: list[tuple[str, Callable[[SchedulerContext, TickReport], None]]] = [
                ("pre_shift", self._pre_shift_reminder),
                ("breaks", self._break_reminders),
                ("end_of_shift", self._end_of_shift_reminder),
                ("overtime_check", self._overtime_check),
                ("auto_checkout", self._auto_checkout),
                ("mark_absent", self._mark_absent),
                ("past_day_repair", self._repair_past_days),
            ]
            for name, run in passes:
                try:
                    run(ctx, report)
                except Exception:
                    report.failed(name)
                    logger.exception("Scheduler pass %s failed for company %s", name, ctx.company_id)

        if report.counts:
            logger.info("Attendance tick at %s: %s", now.isoformat(), dict(report.counts))
        return report

    def backfill_absent(self, start: date, end: date, *, now: datetime | None = None) -> TickReport:
        """Mark absent for past working days in [start, end] with no record and no leave."""
        now = ensure_aware(now or now_utc())
        if end < start:
            raise ValidationError("End date must not be before start date")

        contexts = self.build_contexts(now)
        if any(end >= ctx.today for ctx in contexts):
            raise ValidationError("Absent backfill only covers past days")

        report = TickReport()
        for ctx in contexts:
            for day in iter_days(start, end):
                try:
                    self._mark_absent_on(ctx, day, report, notify=False)
                except Exception:
                    report.failed("mark_absent")
                    logger.exception("Absent backfill failed for %s (company %s)", day, ctx.company_id)
        return report

    # ---- helpers ----

    def _push(
        self, ctx: SchedulerContext, employee: Optional[Employee], build: Callable[[Employee], PushNotification]
    ) -> None:
        if employee is None or not ctx.settings.notifications.push_enabled:
            return
        self._dispatcher.dispatch([build(employee)])

    def _on_holiday(self, ctx: SchedulerContext, day: date) -> set[Optional[int]]:
        """Company ids of this context's employees that have a holiday on `day`.

        The global context mixes companies, and company holidays apply only to
        their own employees, so each company is looked up once.
        """
        companies = {e.company_id for e in ctx.employees.values()}
        return {c for c in companies if self._holidays.get_active_on(day, company_id=c)}

    def _open_records_today(self, ctx: SchedulerContext) -> Sequence[AttendanceRecord]:
        return self._attendance.list_in_progress(work_date=ctx.today, employee_ids=ctx.employees.keys())

    def _broadcast(
        self,
        ctx: SchedulerContext,
        report: TickReport,
        counter: str,
        records: Sequence[AttendanceRecord],
        build: Callable[[Employee], PushNotification],
    ) -> None:
        for record in records:
            employee = ctx.employees.get(record.employee_id)
            try:
                self._push(ctx, employee, build)
                report.bump(counter)
            except Exception:
                report.failed(counter)
                logger.exception("Failed to send %s to employee %s", counter, record.employee_id)

    # ---- reminder passes ----

    def _pre_shift_reminder(self, ctx: SchedulerContext, report: TickReport) -> None:
        settings = ctx.settings
        start = settings.start_at(ctx.today)
        if not ctx.at(start - timedelta(minutes=constants.PRE_SHIFT_REMINDER_MINUTES)):
            return
        if not settings.is_working_day(ctx.today):
            return

        holiday = self._on_holiday(ctx, ctx.today)
        on_leave = {l.employee_id for l in self._leaves.list_approved_on(ctx.today) if not l.work_from_home}
        for employee in ctx.employees.values():
            if employee.employee_id in on_leave or employee.company_id in holiday:
                continue
            try:
                self._push(
                    ctx,
                    employee,
                    lambda e: PushNotification(
                        user_id=e.user_id,
                        title="Office Time Reminder",
                        body=messages.pick_message(messages.PRE_SHIFT, self._rng),
                        event_type="attendance_reminder",
                        data={"type": "office-start", "checkInTime": settings.check_in_time.strftime("%H:%M")},
                    ),
                )
                report.bump("pre_shift")
            except Exception:
                report.failed("pre_shift")
                logger.exception("Failed pre-shift reminder for employee %s", employee.employee_id)

    def _break_reminders(self, ctx: SchedulerContext, report: TickReport) -> None:
        for window in ctx.settings.breaks_on(ctx.today):
            start, end = window.bounds(ctx.today, ctx.settings.timezone)
            if ctx.at(start):
                occasion, title, kind = messages.BREAK_START, f"{window.name} Time!", "break-start"
            elif ctx.at(end):
                occasion, title, kind = messages.BREAK_END, f"{window.name} Ending!", "break-end"
            else:
                continue

            self._broadcast(
                ctx,
                report,
                kind.replace("-", "_"),
                self._open_records_today(ctx),
                lambda employee: PushNotification(
                    user_id=employee.user_id,
                    title=title,
                    body=messages.pick_message(occasion, self._rng),
                    event_type="attendance_reminder",
                    data={"type": kind, "breakName": window.name},
                ),
            )

    def _end_of_shift_reminder(self, ctx: SchedulerContext, report: TickReport) -> None:
        if not ctx.at(ctx.settings.end_at(ctx.today)):
            return
        self._broadcast(
            ctx,
            report,
            "end_of_shift",
            self._open_records_today(ctx),
            lambda employee: PushNotification(
                user_id=employee.user_id,
                title="Time to Head Home!",
                body=messages.pick_message(messages.END_OF_SHIFT, self._rng),
                event_type="attendance_reminder",
                data={"type": "work-off"},
            ),
        )

    # ---- state passes ----

    def _overtime_check(self, ctx: SchedulerContext, report: TickReport) -> None:
        scheduled_end = ctx.settings.end_at(ctx.today)
        if not ctx.at(scheduled_end + timedelta(minutes=constants.OVERTIME_PROMPT_DELAY_MINUTES)):
            return

        for record in self._open_records_today(ctx):
            try:
                if self._overtime.get_open_for_attendance(record.attendance_id):
                    continue
                request = self._overtime.create(
                    OvertimeRequest(
                        request_id=None,
                        employee_id=record.employee_id,
                        attendance_id=record.attendance_id,
                        work_date=record.work_date,
                        scheduled_check_out=scheduled_end,
                        prompt_sent_at=ctx.now,
                    )
                )
                self._push(
                    ctx,
                    ctx.employees.get(record.employee_id),
                    lambda e: PushNotification(
                        user_id=e.user_id,
                        title="OVERTIME CHECK - Response Needed!",
                        body=messages.pick_message(messages.OVERTIME_CHECK, self._rng)
                        + " If you don't respond you will be clocked out at your scheduled time.",
                        event_type="overtime_check",
                        data={"type": "overtime-check", "overtimeRequestId": request.request_id, "requiresAction": True},
                        priority="high",
                    ),
                )
                report.bump("overtime_prompts")
            except Exception:
                report.failed("overtime_check")
                logger.exception(
                    "Overtime prompt failed for attendance %s (employee %s)", record.attendance_id, record.employee_id
                )

    def _auto_checkout(self, ctx: SchedulerContext, report: TickReport) -> None:
        scheduled_end = ctx.settings.end_at(ctx.today)
        if ctx.now < scheduled_end + timedelta(hours=constants.AUTO_CHECKOUT_GRACE_HOURS):
            return

        for record in self._open_records_today(ctx):
            try:
                check_out = max(scheduled_end, record.check_in)
                closure = self._evaluator.closure(
                    check_in=record.check_in,
                    check_out=check_out,
                    check_out_status=CheckOutStatus.AUTO_CHECKOUT,
                    settings=ctx.settings,
                    reason_suffix=AUTO_CHECKOUT_REASON,
                    remark=AUTO_CHECKOUT_REMARK,
                )
                if not self._attendance.close_if_in_progress(record.attendance_id, closure):
                    logger.debug("Attendance %s already closed, skipping auto-checkout", record.attendance_id)
                    continue

                self._expire_overtime(record, ctx.now)
                local_out = to_local(check_out, ctx.settings.timezone).strftime("%H:%M")
                self._push(
                    ctx,
                    ctx.employees.get(record.employee_id),
                    lambda e: PushNotification(
                        user_id=e.user_id,
                        title="Auto Clock-Out",
                        body=(
                            f"{messages.pick_message(messages.AUTO_CHECKOUT, self._rng)} "
                            f"You were checked out at {local_out} (company logout time). "
                            "Overtime not counted for auto-checkouts."
                        ),
                        event_type="attendance_auto_checkout",
                        data={"type": "auto-checkout", "attendanceId": record.attendance_id},
                    ),
                )
                report.bump("auto_checkouts")
            except Exception:
                report.failed("auto_checkout")
                logger.exception(
                    "Auto-checkout failed for attendance %s (employee %s)", record.attendance_id, record.employee_id
                )

    def _expire_overtime(self, record: AttendanceRecord, now: datetime) -> None:
        request = self._overtime.get_open_for_attendance(record.attendance_id)
        if request is None or request.status != OvertimeStatus.PENDING:
            return
        self._overtime.transition(
            request.request_id,
            from_statuses=(OvertimeStatus.PENDING,),
            to_status=OvertimeStatus.AUTO_CHECKOUT,
            auto_checkout_at=now,
        )

    def _mark_absent(self, ctx: SchedulerContext, report: TickReport) -> None:
        if ctx.now < ctx.settings.absent_after(ctx.today):
            return
        self._mark_absent_on(ctx, ctx.today, report, notify=True)

    def _mark_absent_on(self, ctx: SchedulerContext, day: date, report: TickReport, *, notify: bool) -> None:
        settings = ctx.settings
        if not settings.is_working_day(day):
            return
        holiday = self._on_holiday(ctx, day)
        has_record = self._attendance.employee_ids_with_record(day)
        leaves = {}
        for leave in self._leaves.list_approved_on(day):
            leaves.setdefault(leave.employee_id, leave)

        deadline = to_local(settings.absent_after(day), settings.timezone).strftime("%H:%M")
        for employee in ctx.employees.values():
            if employee.employee_id in has_record or employee.company_id in holiday:
                continue
            leave = leaves.get(employee.employee_id)
            if leave is not None and leave.work_from_home:
                continue

            if leave is not None:
                record = AttendanceRecord(
                    attendance_id=None,
                    employee_id=employee.employee_id,
                    work_date=day,
                    status=AttendanceStatus.ON_LEAVE,
                    status_reason="Approved leave",
                )
                counter = "on_leave_records"
            else:
                record = AttendanceRecord(
                    attendance_id=None,
                    employee_id=employee.employee_id,
                    work_date=day,
                    status=AttendanceStatus.ABSENT,
                    status_reason=f"No clock-in by {deadline} ({settings.absent_threshold_minutes} min after start)",
                    remarks="Automatically marked absent",
                )
                counter = "marked_absent"

            try:
                created = self._attendance.create(record)
            except DuplicateAttendanceError:
                logger.debug("Employee %s already has a record for %s", employee.employee_id, day)
                continue
            except Exception:
                report.failed("mark_absent")
                logger.exception("Failed to mark employee %s for %s", employee.employee_id, day)
                continue

            report.bump(counter)
            if notify and created.status == AttendanceStatus.ABSENT:
                try:
                    self._push(
                        ctx,
                        employee,
                        lambda e: PushNotification(
                            user_id=e.user_id,
                            title="Marked Absent",
                            body=(
                                f"You have been marked absent for {day.isoformat()} because no clock-in was "
                                f"recorded by {deadline}. Raise a correction request if this is wrong."
                            ),
                            event_type="attendance_absent",
                            data={"type": "marked-absent", "attendanceId": created.attendance_id},
                        ),
                    )
                except Exception:
                    logger.exception("Failed absent notification for employee %s", employee.employee_id)

    def _stale_records(self, ctx: SchedulerContext) -> Sequence[AttendanceRecord]:
        """Open records dated before today whose employee's company falls in this context.

        Employees deactivated after clocking in are included; unknown employees
        belong to the global context.
        """
        result = []
        for record in self._attendance.list_in_progress(before=ctx.today):
            employee = ctx.employees.get(record.employee_id) or self._employees.get_by_id(record.employee_id)
            if ctx.covers(employee.company_id if employee else None):
                result.append(record)
        return result

    def _repair_past_days(self, ctx: SchedulerContext, report: TickReport) -> None:
        for record in self._stale_records(ctx):
            try:
                scheduled_end = ctx.settings.end_at(record.work_date)
                check_out = max(record.check_in, scheduled_end)
                remark = (
                    f"Auto-corrected: still clocked in after {record.work_date.isoformat()}. "
                    "Checked out at scheduled logout time. Overtime not counted. Raise correction request if needed."
                )
                closure = self._evaluator.closure(
                    check_in=record.check_in,
                    check_out=check_out,
                    check_out_status=CheckOutStatus.AUTO_CORRECTED,
                    settings=ctx.settings,
                    reason_suffix=PAST_DAY_REASON,
                    remark=remark,
                )
                if not self._attendance.close_if_in_progress(record.attendance_id, closure):
                    logger.debug("Attendance %s already closed, skipping repair", record.attendance_id)
                    continue

                self._expire_overtime(record, ctx.now)
                self._push(
                    ctx,
                    ctx.employees.get(record.employee_id),
                    lambda e: PushNotification(
                        user_id=e.user_id,
                        title="Attendance Auto-Correction",
                        body=(
                            f"Your attendance for {record.work_date.isoformat()} was still open and has been "
                            "closed at your scheduled logout time. Overtime is not counted unless you file a "
                            "correction request."
                        ),
                        event_type="attendance_auto_corrected",
                        data={"type": "past-day-auto-checkout", "attendanceId": record.attendance_id},
                    ),
                )
                report.bump("past_day_repairs")
            except Exception:
                report.failed("past_day_repair")
                logger.exception(
                    "Past-day repair failed for attendance %s (employee %s)", record.attendance_id, record.employee_id
                )

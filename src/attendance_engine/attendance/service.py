from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Sequence

from ..common.datetime_utils import ensure_aware, hours_between, now_utc, round2
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, OvertimeStatus
from ..core.exceptions import (
    AlreadyClockedIn,
    AlreadyClockedOut,
    DuplicateAttendanceError,
    EmployeeNotFound,
    HolidayBlocked,
    LocationRequired,
    NotAWorkingDay,
    NotClockedIn,
    OutsideGeofence,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..geofence.model import GeoPoint, GeoResolution
from ..geofence.repository import GeofenceRepository
from ..geofence.resolver import GeoResolver
from ..notifications.effects import Effect
from ..overtime.repository import OvertimeRepository
from ..settings.model import ResolvedSettings
from ..settings.service import SettingsService
from ..workcalendar.repository import HolidayRepository, LeaveRepository
from .evaluation import WorkdayEvaluator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, LocationStamp
from .notices import clock_in_effects, clock_out_effects
from .repository import AttendanceRepository
from .team import TeamMemberDay, TeamToday, pending_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockOutcome:
    """Result of a clock event plus the side effects the caller should dispatch."""

    record: AttendanceRecord
    effects: Sequence[Effect] = field(default_factory=tuple)


@dataclass(frozen=True)
class LocationCheck:
    resolution: Optional[GeoResolution]
    geofence_required: bool
    allowed: bool


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        settings: SettingsService,
        leaves: LeaveRepository,
        holidays: HolidayRepository,
        geofences: GeofenceRepository,
        overtime: OvertimeRepository,
        *,
        geo_resolver: GeoResolver | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        evaluator: WorkdayEvaluator | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._leaves = leaves
        self._holidays = holidays
        self._geofences = geofences
        self._overtime = overtime
        self._resolver = geo_resolver or GeoResolver()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._evaluator = evaluator or WorkdayEvaluator()

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise EmployeeNotFound(int(employee_id))
        return employee

    def _resolve_location(
        self,
        employee: Employee,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> Optional[GeoResolution]:
        if latitude is None or longitude is None:
            return None
        locations = self._geofences.list_active(company_id=employee.company_id)
        return self._resolver.resolve(
            GeoPoint(latitude, longitude),
            employee_id=employee.employee_id,
            department_id=employee.department_id,
            locations=locations,
        )

    @staticmethod
    def _geofence_applies(settings: ResolvedSettings, work_from_home: bool) -> bool:
        geofence = settings.geofence
        return geofence.enabled and geofence.use_multiple_locations and not work_from_home

    @staticmethod
    def _stamp(
        latitude: Optional[float],
        longitude: Optional[float],
        address: Optional[str],
        resolution: Optional[GeoResolution],
    ) -> Optional[LocationStamp]:
        if latitude is None or longitude is None:
            return None
        location = None
        if resolution is not None and resolution.is_within_any_geofence:
            location = resolution.nearest_location
        return LocationStamp(
            latitude=latitude,
            longitude=longitude,
            address=address,
            location_id=location.location_id if location else None,
            location_name=location.name if location else None,
        )

    def clock_in(
        self,
        employee_id: int,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        address: Optional[str] = None,
        now: datetime | None = None,
    ) -> ClockOutcome:
        now = ensure_aware(now or now_utc())

        employee = self._require_employee(employee_id)
        settings = self._settings.for_employee(employee)
        work_date = settings.today(now)

        leave = self._leaves.get_approved_for(employee.employee_id, work_date)
        work_from_home = bool(leave and leave.work_from_home)

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if existing and existing.check_in is not None:
            raise AlreadyClockedIn()

        if not settings.is_working_day(work_date):
            raise NotAWorkingDay()

        holiday = self._holidays.get_active_on(work_date, company_id=employee.company_id)
        if holiday:
            raise HolidayBlocked(holiday.name)

        geofence_validated = False
        resolution = None
        if self._geofence_applies(settings, work_from_home):
            resolution = self._resolve_location(employee, latitude, longitude)
            if settings.geofence.strict_mode:
                if resolution is None:
                    raise LocationRequired()
                if not resolution.is_within_any_geofence:
                    nearest = resolution.nearest_location
                    raise OutsideGeofence(resolution.distance_m, nearest.name if nearest else None)
            geofence_validated = bool(resolution and resolution.is_within_any_geofence)

        strategy = self._factory.for_checkin(now=now, work_date=work_date, settings=settings)
        decision = strategy.decide_checkin(now=now, work_date=work_date, settings=settings)
        location = self._stamp(latitude, longitude, address, resolution)

        record = None
        if existing is None:
            try:
                record = self._attendance.create(
                    AttendanceRecord(
                        attendance_id=None,
                        employee_id=employee.employee_id,
                        work_date=work_date,
                        status=AttendanceStatus.IN_PROGRESS,
                        check_in=now,
                        check_in_status=decision.status,
                        status_reason=decision.note,
                        work_from_home=work_from_home,
                        geofence_validated=geofence_validated,
                        check_in_location=location,
                    )
                )
            except DuplicateAttendanceError:
                logger.info("Attendance for employee %s on %s created concurrently", employee.employee_id, work_date)
                existing = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
                if existing is None or existing.check_in is not None:
                    raise AlreadyClockedIn()

        if record is None:
            ok = self._attendance.record_check_in(
                attendance_id=existing.attendance_id,
                check_in=now,
                check_in_status=decision.status,
                work_from_home=work_from_home or existing.work_from_home,
                geofence_validated=geofence_validated,
                location=location,
                status_reason=decision.note,
            )
            if not ok:
                raise AlreadyClockedIn()
            record = self._attendance.get_by_id(existing.attendance_id)

        logger.info(
            "Employee %s clocked in on %s (%s)", employee.employee_id, work_date, record.check_in_status.value
        )
        return ClockOutcome(record=record, effects=tuple(clock_in_effects(employee, record, settings)))

    def clock_out(
        self,
        employee_id: int,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        address: Optional[str] = None,
        now: datetime | None = None,
    ) -> ClockOutcome:
        now = ensure_aware(now or now_utc())

        employee = self._require_employee(employee_id)
        settings = self._settings.for_employee(employee)
        work_date = settings.today(now)

        record = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if not record or record.check_in is None:
            raise NotClockedIn()
        if record.check_out is not None:
            raise AlreadyClockedOut()

        # Location is recorded for audit only; strict mode never blocks clock-out.
        resolution = None
        if self._geofence_applies(settings, record.work_from_home):
            resolution = self._resolve_location(employee, latitude, longitude)
        location = self._stamp(latitude, longitude, address, resolution)

        check_out = max(now, record.check_in)
        strategy = self._factory.for_checkout(now=check_out, work_date=work_date, settings=settings)
        decision = strategy.decide_checkout(now=check_out, work_date=work_date, settings=settings)

        confirmed = self._overtime.get_open_for_attendance(record.attendance_id)
        overtime_hours = None
        if confirmed is not None and confirmed.status == OvertimeStatus.CONFIRMED:
            overtime_hours = round2(max(0.0, hours_between(confirmed.scheduled_check_out, check_out)))

        closure = self._evaluator.closure(
            check_in=record.check_in,
            check_out=check_out,
            check_out_status=decision.status,
            settings=settings,
            reason_suffix=decision.reason_suffix,
            overtime_hours=overtime_hours,
            location=location,
        )
        if not self._attendance.close_if_in_progress(record.attendance_id, closure):
            raise AlreadyClockedOut()

        if overtime_hours is not None:
            moved = self._overtime.transition(
                confirmed.request_id,
                from_statuses=(OvertimeStatus.CONFIRMED,),
                to_status=OvertimeStatus.MANUAL_CHECKOUT,
                overtime_hours=overtime_hours,
            )
            if not moved:
                logger.warning("Overtime request %s changed before reconciliation", confirmed.request_id)

        closed = self._attendance.get_by_id(record.attendance_id)
        logger.info(
            "Employee %s clocked out on %s: %.2fh effective, %s",
            employee.employee_id,
            work_date,
            closed.work_hours,
            closed.status.value,
        )
        return ClockOutcome(record=closed, effects=tuple(clock_out_effects(employee, closed, settings)))

    def check_location(
        self,
        employee_id: int,
        *,
        latitude: float,
        longitude: float,
        now: datetime | None = None,
    ) -> LocationCheck:
        """Geofence pre-check before the employee taps clock-in."""
        now = ensure_aware(now or now_utc())
        employee = self._require_employee(employee_id)
        settings = self._settings.for_employee(employee)
        leave = self._leaves.get_approved_for(employee.employee_id, settings.today(now))
        required = self._geofence_applies(settings, bool(leave and leave.work_from_home))

        resolution = self._resolve_location(employee, latitude, longitude)
        allowed = True
        if required and settings.geofence.strict_mode:
            allowed = bool(resolution and resolution.is_within_any_geofence)
        return LocationCheck(resolution=resolution, geofence_required=required, allowed=allowed)

    def record_leave_day(self, employee_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        """Make sure an approved leave/WFH day has its attendance record.

        Returns the day's record, or None when there is no approved leave.
        """
        now = ensure_aware(now or now_utc())
        employee = self._require_employee(employee_id)
        settings = self._settings.for_employee(employee)
        work_date = settings.today(now)

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if existing:
            return existing

        leave = self._leaves.get_approved_for(employee.employee_id, work_date)
        if not leave:
            return None

        status = AttendanceStatus.IN_PROGRESS if leave.work_from_home else AttendanceStatus.ON_LEAVE
        try:
            return self._attendance.create(
                AttendanceRecord(
                    attendance_id=None,
                    employee_id=employee.employee_id,
                    work_date=work_date,
                    status=status,
                    status_reason="Approved work from home" if leave.work_from_home else "Approved leave",
                    work_from_home=leave.work_from_home,
                )
            )
        except DuplicateAttendanceError:
            return self._attendance.get_for_employee_and_date(employee.employee_id, work_date)

    def get_today(self, employee_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        """Today's record, synthesizing it for approved leave/WFH."""
        return self.record_leave_day(employee_id, now=now)

    def get_history(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_employee(int(employee_id), int(limit))

    def get_team_today(self, viewer_id: int, *, now: datetime | None = None) -> TeamToday:
        """Today's attendance for everyone the viewer may see.

        Admin and HR see every active employee. Others see their direct reports
        and their own department.
        """
        now = ensure_aware(now or now_utc())
        viewer = self._require_employee(viewer_id)
        members = [
            e
            for e in self._employees.list_active()
            if viewer.has_org_wide_access
            or e.reporting_manager_id == viewer.employee_id
            or (viewer.department_id is not None and e.department_id == viewer.department_id)
        ]

        by_day: Dict[date, list[Employee]] = {}
        settings_for: Dict[int, ResolvedSettings] = {}
        for member in members:
            settings_for[member.employee_id] = self._settings.for_employee(member)
            by_day.setdefault(settings_for[member.employee_id].today(now), []).append(member)

        result = []
        for day, group in sorted(by_day.items()):
            records = {
                r.employee_id: r for r in self._attendance.list_for_date(day, [e.employee_id for e in group])
            }
            on_leave = {l.employee_id for l in self._leaves.list_approved_on(day) if not l.work_from_home}
            holidays: Dict[Optional[int], bool] = {}
            for member in group:
                record = records.get(member.employee_id)
                if member.employee_id in on_leave:
                    status = AttendanceStatus.ON_LEAVE.value
                elif record is not None:
                    status = record.status.value
                else:
                    if member.company_id not in holidays:
                        holidays[member.company_id] = bool(
                            self._holidays.get_active_on(day, company_id=member.company_id)
                        )
                    settings = settings_for[member.employee_id]
                    working_day = settings.is_working_day(day) and not holidays[member.company_id]
                    status = pending_status(now, settings, working_day=working_day)
                result.append(TeamMemberDay(employee=member, status=status, record=record))

        result.sort(key=lambda m: m.employee.employee_id)
        return TeamToday(members=tuple(result))

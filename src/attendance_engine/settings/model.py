from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from ..common.datetime_utils import at_local, local_date, parse_hhmm, weekday_name
from ..core import constants


@dataclass(frozen=True)
class BreakWindow:
    """A named break (lunch, tea, ...) on given weekdays.

    An empty `days` tuple means the break applies every day.
    """

    name: str
    start_time: time
    end_time: time
    days: Tuple[str, ...] = ()
    is_active: bool = True

    def applies_on(self, day: date) -> bool:
        if not self.is_active:
            return False
        if not self.days:
            return True
        return weekday_name(day) in {d.lower() for d in self.days}

    def bounds(self, day: date, tz: str) -> tuple[datetime, datetime]:
        return at_local(day, self.start_time, tz), at_local(day, self.end_time, tz)


@dataclass(frozen=True)
class GeofenceConfig:
    enabled: bool = False
    strict_mode: bool = False
    use_multiple_locations: bool = False


@dataclass(frozen=True)
class NotificationPreferences:
    email_enabled: bool = True
    push_enabled: bool = True
    email_on_clock_in: bool = True
    email_on_present: bool = True
    email_on_half_day: bool = True
    email_on_absent: bool = True


def _default_check_in() -> time:
    return parse_hhmm(constants.DEFAULT_CHECK_IN_TIME)


def _default_check_out() -> time:
    return parse_hhmm(constants.DEFAULT_CHECK_OUT_TIME)


@dataclass(frozen=True)
class CompanySettings:
    """Global attendance policy (the single settings row)."""

    check_in_time: time = field(default_factory=_default_check_in)
    check_out_time: time = field(default_factory=_default_check_out)
    late_threshold_minutes: int = constants.DEFAULT_LATE_THRESHOLD_MINUTES
    full_day_hours: float = constants.DEFAULT_FULL_DAY_HOURS
    half_day_hours: float = constants.DEFAULT_HALF_DAY_HOURS
    working_days: Tuple[str, ...] = constants.DEFAULT_WORKING_DAYS
    break_timings: Tuple[BreakWindow, ...] = ()
    geofence: GeofenceConfig = field(default_factory=GeofenceConfig)
    timezone: str = constants.DEFAULT_TIMEZONE
    absent_threshold_minutes: int = constants.DEFAULT_ABSENT_THRESHOLD_MINUTES
    notifications: NotificationPreferences = field(default_factory=NotificationPreferences)


@dataclass(frozen=True)
class CompanyOverrides:
    """Per-company working hours. `None` means "use the global value"."""

    company_id: int
    check_in_time: Optional[time] = None
    check_out_time: Optional[time] = None
    late_threshold_minutes: Optional[int] = None
    full_day_hours: Optional[float] = None
    half_day_hours: Optional[float] = None
    working_days: Optional[Tuple[str, ...]] = None
    break_timings: Optional[Tuple[BreakWindow, ...]] = None
    geofence: Optional[GeofenceConfig] = None
    timezone: Optional[str] = None
    absent_threshold_minutes: Optional[int] = None
    notifications: Optional[NotificationPreferences] = None


@dataclass(frozen=True)
class ResolvedSettings(CompanySettings):
    """Effective settings for one decision; `company_id` is None for the global context."""

    company_id: Optional[int] = None

    def is_working_day(self, day: date) -> bool:
        return weekday_name(day) in {d.lower() for d in self.working_days}

    def today(self, now: datetime) -> date:
        return local_date(now, self.timezone)

    def start_at(self, day: date) -> datetime:
        return at_local(day, self.check_in_time, self.timezone)

    def end_at(self, day: date) -> datetime:
        return at_local(day, self.check_out_time, self.timezone)

    def late_after(self, day: date) -> datetime:
        return self.start_at(day) + timedelta(minutes=int(self.late_threshold_minutes))

    def absent_after(self, day: date) -> datetime:
        return self.start_at(day) + timedelta(minutes=int(self.absent_threshold_minutes))

    def breaks_on(self, day: date) -> list[BreakWindow]:
        return [b for b in self.break_timings if b.applies_on(day)]

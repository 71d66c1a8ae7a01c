from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import WEEKDAY_NAMES
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_hhmm(value: str | time) -> time:
    """Parse an "HH:MM" (or "HH:MM:SS") office time."""
    if isinstance(value, time):
        return value
    v = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name!r}")


def now_utc() -> datetime:
    """Current time as an aware UTC datetime.

    Note: Wrapped so tests can pass a fixed `now` instead.
    """
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_local(moment: datetime, tz: str) -> datetime:
    return ensure_aware(moment).astimezone(get_zone(tz))


def local_date(moment: datetime, tz: str) -> date:
    """Calendar day of `moment` in the company timezone."""
    return to_local(moment, tz).date()


def at_local(day: date, t: time, tz: str) -> datetime:
    """`t` o'clock on `day` in the company timezone, as an aware datetime."""
    return datetime.combine(day, t, tzinfo=get_zone(tz))


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def floor_minute(moment: datetime) -> datetime:
    return moment.replace(second=0, microsecond=0)


def same_minute(a: datetime, b: datetime) -> bool:
    return floor_minute(ensure_aware(a)) == floor_minute(ensure_aware(b))


def iter_days(start: date, end: date):
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def round2(value: float) -> float:
    return round(float(value), 2)

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ...common.datetime_utils import ensure_aware, local_date
from ...settings.model import BreakWindow


@dataclass(frozen=True)
class UpcomingBreak:
    window: BreakWindow
    starts_at: datetime
    minutes_until: int


def active_break_at(breaks: Sequence[BreakWindow], moment: datetime, tz: str) -> Optional[BreakWindow]:
    """The break window `moment` falls in, if any."""
    moment = ensure_aware(moment)
    day = local_date(moment, tz)
    for window in breaks:
        if not window.applies_on(day):
            continue
        start, end = window.bounds(day, tz)
        if start <= moment < end:
            return window
    return None


def upcoming_break(breaks: Sequence[BreakWindow], moment: datetime, tz: str) -> Optional[UpcomingBreak]:
    """Next break starting later today."""
    moment = ensure_aware(moment)
    day = local_date(moment, tz)
    best: Optional[UpcomingBreak] = None
    for window in breaks:
        if not window.applies_on(day):
            continue
        start, _ = window.bounds(day, tz)
        if start <= moment:
            continue
        if best is None or start < best.starts_at:
            minutes = int((start - moment).total_seconds() // 60)
            best = UpcomingBreak(window=window, starts_at=start, minutes_until=minutes)
    return best

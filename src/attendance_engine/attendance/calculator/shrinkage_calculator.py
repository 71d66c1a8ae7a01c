from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ...common.datetime_utils import ensure_aware, local_date, round2
from ...settings.model import BreakWindow
from .base import WorkHours, WorkHoursCalculator


def overlap_seconds(start: datetime, end: datetime, window_start: datetime, window_end: datetime) -> float:
    return max(0.0, (min(end, window_end) - max(start, window_start)).total_seconds())


class ShrinkageCalculator(WorkHoursCalculator):
    """Shrinkage rule: logged time minus the part of it spent inside configured breaks.

    Breaks are laid on the check-in day (company timezone) and only count on the
    weekdays they apply to. Breaks are assumed not to overlap each other.
    """

    def calculate(self, check_in: datetime, check_out: datetime, breaks: Sequence[BreakWindow], tz: str) -> WorkHours:
        check_in = ensure_aware(check_in)
        check_out = ensure_aware(check_out)

        logged_seconds = max(0.0, (check_out - check_in).total_seconds())
        if logged_seconds == 0:
            return WorkHours(total_logged_hours=0.0, break_minutes=0, effective_work_hours=0.0, shrinkage_percentage=0.0)

        day = local_date(check_in, tz)
        break_seconds = 0.0
        for window in breaks:
            if not window.applies_on(day):
                continue
            window_start, window_end = window.bounds(day, tz)
            if window_end <= window_start:
                continue
            break_seconds += overlap_seconds(check_in, check_out, window_start, window_end)

        effective_seconds = max(0.0, logged_seconds - break_seconds)
        shrinkage = min(100.0, break_seconds / logged_seconds * 100)

        return WorkHours(
            total_logged_hours=round2(logged_seconds / 3600),
            break_minutes=int(round(break_seconds / 60)),
            effective_work_hours=round2(effective_seconds / 3600),
            shrinkage_percentage=round2(shrinkage),
        )

from __future__ import annotations

from datetime import date, datetime

from ...core.enums import CheckInStatus, CheckOutStatus
from ...settings.model import ResolvedSettings
from .base import AttendanceStrategy, StatusDecision, minutes_between


class LateStrategy(AttendanceStrategy):
    """Late check-in (after start + late threshold), late leave on check-out."""

    def decide_checkin(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> StatusDecision:
        late_by = minutes_between(settings.start_at(work_date), now)
        return StatusDecision(status=CheckInStatus.LATE, note=f"Late by {late_by} min")

    def decide_checkout(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> StatusDecision:
        # Leaving after the scheduled end is never penalized.
        stayed = minutes_between(settings.end_at(work_date), now)
        return StatusDecision(status=CheckOutStatus.ON_TIME, note=f"Left {stayed} min after end of shift")

from __future__ import annotations

from datetime import date, datetime

from ...core.enums import CheckInStatus, CheckOutStatus
from ...settings.model import ResolvedSettings
from .base import AttendanceStrategy, StatusDecision, minutes_between


class EarlyStrategy(AttendanceStrategy):
    """Early arrival on check-in, early leave on check-out."""

    def decide_checkin(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> StatusDecision:
        early_by = minutes_between(now, settings.start_at(work_date))
        return StatusDecision(status=CheckInStatus.EARLY, note=f"Early by {early_by} min")

    def decide_checkout(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> StatusDecision:
        early_by = minutes_between(now, settings.end_at(work_date))
        return StatusDecision(status=CheckOutStatus.EARLY, note=f"Left {early_by} min before end of shift")

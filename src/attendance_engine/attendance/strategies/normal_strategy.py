from __future__ import annotations

from datetime import date, datetime

from ...core.enums import CheckInStatus, CheckOutStatus
from ...settings.model import ResolvedSettings
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in, normal check-out."""

    def decide_checkin(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> StatusDecision:
        return StatusDecision(status=CheckInStatus.ON_TIME)

    def decide_checkout(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> StatusDecision:
        return StatusDecision(status=CheckOutStatus.ON_TIME)

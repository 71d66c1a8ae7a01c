from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..common.datetime_utils import ensure_aware
from ..core.constants import EARLY_CHECKOUT_BUFFER_SECONDS
from ..settings.model import ResolvedSettings
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    checkout_buffer_seconds: int = EARLY_CHECKOUT_BUFFER_SECONDS

    def for_checkin(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> AttendanceStrategy:
        now = ensure_aware(now)
        if now < settings.start_at(work_date):
            return EarlyStrategy()
        if now > settings.late_after(work_date):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> AttendanceStrategy:
        now = ensure_aware(now)
        buffer = timedelta(seconds=self.checkout_buffer_seconds)
        if now < settings.end_at(work_date) - buffer:
            return EarlyStrategy()
        if now > settings.end_at(work_date) + buffer:
            return LateStrategy()
        return NormalStrategy()

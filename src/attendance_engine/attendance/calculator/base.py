from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from ...settings.model import BreakWindow


@dataclass(frozen=True)
class WorkHours:
    total_logged_hours: float
    break_minutes: int
    effective_work_hours: float
    shrinkage_percentage: float


class WorkHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for work-hour rules)."""

    @abstractmethod
    def calculate(self, check_in: datetime, check_out: datetime, breaks: Sequence[BreakWindow], tz: str) -> WorkHours:
        raise NotImplementedError

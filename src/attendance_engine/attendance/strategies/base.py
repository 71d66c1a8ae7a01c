from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ...core.enums import CheckInStatus, CheckOutStatus
from ...settings.model import ResolvedSettings


@dataclass(frozen=True)
class StatusDecision:
    status: Union[CheckInStatus, CheckOutStatus]
    note: Optional[str] = None

    @property
    def reason_suffix(self) -> Optional[str]:
        return f"({self.note})" if self.note else None


def minutes_between(earlier: datetime, later: datetime) -> int:
    return int((later - earlier).total_seconds() // 60)


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide check-in/check-out timeliness."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, now: datetime, work_date: date, settings: ResolvedSettings) -> StatusDecision:
        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, CheckOutStatus
from ..settings.model import ResolvedSettings
from .calculator.base import WorkHours, WorkHoursCalculator
from .calculator.shrinkage_calculator import ShrinkageCalculator
from .classifier import Classification, StatusClassifier
from .model import AttendanceClosure, LocationStamp


@dataclass(frozen=True)
class WorkdayEvaluation:
    hours: WorkHours
    classification: Classification

    @property
    def status(self) -> AttendanceStatus:
        return self.classification.status


class WorkdayEvaluator:
    """Shrinkage then classification, shared by every path that closes a record."""

    def __init__(self, calculator: WorkHoursCalculator | None = None, classifier: StatusClassifier | None = None):
        self._calculator = calculator or ShrinkageCalculator()
        self._classifier = classifier or StatusClassifier()

    def evaluate(self, check_in: datetime, check_out: datetime, settings: ResolvedSettings) -> WorkdayEvaluation:
        hours = self._calculator.calculate(check_in, check_out, settings.break_timings, settings.timezone)
        classification = self._classifier.classify(
            hours.effective_work_hours,
            full_day_hours=settings.full_day_hours,
            half_day_hours=settings.half_day_hours,
        )
        return WorkdayEvaluation(hours=hours, classification=classification)

    def closure(
        self,
        *,
        check_in: datetime,
        check_out: datetime,
        check_out_status: CheckOutStatus,
        settings: ResolvedSettings,
        reason_suffix: Optional[str] = None,
        overtime_hours: Optional[float] = None,
        location: Optional[LocationStamp] = None,
        remark: Optional[str] = None,
    ) -> AttendanceClosure:
        evaluation = self.evaluate(check_in, check_out, settings)
        reason = evaluation.classification.reason
        if reason_suffix:
            reason = f"{reason} {reason_suffix}"
        return AttendanceClosure(
            check_out=check_out,
            check_out_status=check_out_status,
            status=evaluation.status,
            status_reason=reason,
            work_hours=evaluation.hours.effective_work_hours,
            total_logged_hours=evaluation.hours.total_logged_hours,
            break_minutes=evaluation.hours.break_minutes,
            shrinkage_percentage=evaluation.hours.shrinkage_percentage,
            overtime_hours=overtime_hours,
            check_out_location=location,
            remark=remark,
        )

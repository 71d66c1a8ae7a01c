from __future__ import annotations

from dataclasses import dataclass

from ..common.datetime_utils import round2
from ..core.constants import PRESENT_RATIO
from ..core.enums import AttendanceStatus

# absent < half-day < present
STATUS_RANK = {
    AttendanceStatus.ABSENT: 0,
    AttendanceStatus.HALF_DAY: 1,
    AttendanceStatus.PRESENT: 2,
}


@dataclass(frozen=True)
class Classification:
    status: AttendanceStatus
    reason: str


class StatusClassifier:
    """90/50 rule.

    Present at 90% of the full day. Half-day uses the separately configured
    half_day_hours (nominally 50% of the full day); below that is absent.
    """

    def classify(self, effective_hours: float, *, full_day_hours: float, half_day_hours: float) -> Classification:
        hours = round2(effective_hours)
        full_threshold = round2(float(full_day_hours) * PRESENT_RATIO)
        half_threshold = round2(half_day_hours)

        if hours >= full_threshold:
            return Classification(
                AttendanceStatus.PRESENT,
                f"Worked {hours:.2f} hours (>={full_threshold:g}h threshold for full day)",
            )
        if hours >= half_threshold:
            return Classification(
                AttendanceStatus.HALF_DAY,
                f"Worked {hours:.2f} hours (>={half_threshold:g}h half-day threshold, "
                f"<{full_threshold:g}h for full day)",
            )
        return Classification(
            AttendanceStatus.ABSENT,
            f"Worked only {hours:.2f} hours (<{half_threshold:g}h half-day threshold)",
        )

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CorrectionStatus
from .model import AttendanceCorrection


class CorrectionRepository(Protocol):
    def create(self, correction: AttendanceCorrection) -> AttendanceCorrection:
        raise NotImplementedError

    def get_by_id(self, correction_id: int) -> Optional[AttendanceCorrection]:
        raise NotImplementedError

    def get_pending_for_attendance(self, attendance_id: int) -> Optional[AttendanceCorrection]:
        raise NotImplementedError

    def decide(
        self,
        correction_id: int,
        *,
        status: CorrectionStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        comments: Optional[str] = None,
    ) -> bool:
        """Conditional on the correction still being pending."""

        raise NotImplementedError

    def list_corrections(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[CorrectionStatus] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceCorrection]:
        raise NotImplementedError

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Employee roles; admin and HR see the whole organisation."""

    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Primary state of a day's attendance record."""

    IN_PROGRESS = "in-progress"
    PRESENT = "present"
    HALF_DAY = "half-day"
    ABSENT = "absent"
    ON_LEAVE = "on-leave"


class CheckInStatus(str, Enum):
    EARLY = "early"
    ON_TIME = "on-time"
    LATE = "late"


class CheckOutStatus(str, Enum):
    EARLY = "early"
    ON_TIME = "on-time"
    AUTO_CHECKOUT = "auto-checkout"
    AUTO_CORRECTED = "auto-corrected"


class OvertimeStatus(str, Enum):
    """Lifecycle of an overtime confirmation prompt."""

    PENDING = "pending"
    CONFIRMED = "overtime-confirmed"
    MANUAL_CHECKOUT = "manual-checkout"
    AUTO_CHECKOUT = "auto-checkout"


class CorrectionType(str, Enum):
    MISSING_ENTRY = "missing-entry"
    WRONG_TIME = "wrong-time"
    OVERTIME = "overtime"
    STATUS = "status"


class CorrectionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

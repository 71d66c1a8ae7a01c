class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DuplicateAttendanceError(DomainError):
    """Raised by repositories when (employee, work_date) already has a record."""


class AttendanceRejected(ValidationError):
    """A clock event was refused; nothing was written."""


class AlreadyClockedIn(AttendanceRejected):
    def __init__(self, message: str = "Already clocked in today"):
        super().__init__(message)


class AlreadyClockedOut(AttendanceRejected):
    def __init__(self, message: str = "Already clocked out today"):
        super().__init__(message)


class NotClockedIn(AttendanceRejected):
    def __init__(self, message: str = "Please clock in first"):
        super().__init__(message)


class NotAWorkingDay(AttendanceRejected):
    def __init__(self, message: str = "Today is not a working day"):
        super().__init__(message)


class HolidayBlocked(AttendanceRejected):
    def __init__(self, holiday_name: str | None = None):
        self.holiday_name = holiday_name
        if holiday_name:
            message = f"Today is a holiday ({holiday_name}). Attendance is not required."
        else:
            message = "Today is a holiday. Attendance is not required."
        super().__init__(message)


class LocationRequired(AttendanceRejected):
    def __init__(self, message: str = "Location is required to clock in"):
        super().__init__(message)


class OutsideGeofence(AttendanceRejected):
    """Carries the distance and closest office for display."""

    def __init__(self, distance_m: int | None, nearest_location_name: str | None):
        self.distance_m = distance_m
        self.nearest_location_name = nearest_location_name
        distance = "?" if distance_m is None else str(distance_m)
        super().__init__(
            f"You must be within {distance}m of an office location to check in. "
            f"Closest location: {nearest_location_name or 'Unknown'}"
        )


class EmployeeNotFound(NotFoundError):
    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found")


class RecordNotFound(NotFoundError):
    """Raised when an attendance, overtime or correction record is missing."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import REMARK_SEPARATOR
from ..core.enums import AttendanceStatus, CheckInStatus, CheckOutStatus


@dataclass(frozen=True)
class LocationStamp:
    """Where a clock event happened, plus the office geofence it resolved to."""

    latitude: float
    longitude: float
    address: Optional[str] = None
    location_id: Optional[int] = None
    location_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "locationId": self.location_id,
            "locationName": self.location_name,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["LocationStamp"]:
        if not data:
            return None
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            address=data.get("address"),
            location_id=data.get("locationId"),
            location_name=data.get("locationName"),
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one company-local day.

    `attendance_id` is None until the record has been stored.
    """

    attendance_id: Optional[int]
    employee_id: int
    work_date: date
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    check_in_status: Optional[CheckInStatus] = None
    check_out_status: Optional[CheckOutStatus] = None
    work_hours: float = 0.0
    total_logged_hours: float = 0.0
    break_minutes: int = 0
    shrinkage_percentage: float = 0.0
    overtime_hours: Optional[float] = None
    status_reason: Optional[str] = None
    work_from_home: bool = False
    geofence_validated: bool = False
    check_in_location: Optional[LocationStamp] = None
    check_out_location: Optional[LocationStamp] = None
    remarks: str = ""
    is_manual_entry: bool = False

    @property
    def is_open(self) -> bool:
        """Clocked in, not clocked out, still in progress."""
        return self.status == AttendanceStatus.IN_PROGRESS and self.check_in is not None and self.check_out is None

    def to_dict(self) -> dict:
        return {
            "attendanceId": self.attendance_id,
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "statusReason": self.status_reason,
            "checkIn": self.check_in.isoformat() if self.check_in else None,
            "checkOut": self.check_out.isoformat() if self.check_out else None,
            "checkInStatus": self.check_in_status.value if self.check_in_status else None,
            "checkOutStatus": self.check_out_status.value if self.check_out_status else None,
            "workHours": self.work_hours,
            "totalLoggedHours": self.total_logged_hours,
            "breakMinutes": self.break_minutes,
            "shrinkagePercentage": self.shrinkage_percentage,
            "overtime": self.overtime_hours,
            "workFromHome": self.work_from_home,
            "geofenceValidated": self.geofence_validated,
            "location": {
                "checkIn": self.check_in_location.to_dict() if self.check_in_location else None,
                "checkOut": self.check_out_location.to_dict() if self.check_out_location else None,
            },
            "remarks": self.remarks,
            "isManualEntry": self.is_manual_entry,
        }


@dataclass(frozen=True)
class AttendanceClosure:
    """Field values written when an in-progress record is closed."""

    check_out: datetime
    check_out_status: CheckOutStatus
    status: AttendanceStatus
    status_reason: str
    work_hours: float
    total_logged_hours: float
    break_minutes: int
    shrinkage_percentage: float
    overtime_hours: Optional[float] = None
    check_out_location: Optional[LocationStamp] = None
    remark: Optional[str] = None


def append_remark(remarks: Optional[str], remark: Optional[str]) -> str:
    """Remarks are an append-only audit trail."""
    if not remark:
        return remarks or ""
    if not remarks:
        return remark
    return f"{remarks}{REMARK_SEPARATOR}{remark}"

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeofenceLocation:
    """A circular office zone. Empty allow-lists mean anyone may use it."""

    location_id: int
    name: str
    latitude: float
    longitude: float
    radius_m: float
    allowed_department_ids: FrozenSet[int] = field(default_factory=frozenset)
    allowed_employee_ids: FrozenSet[int] = field(default_factory=frozenset)
    is_active: bool = True
    company_id: Optional[int] = None

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    def is_restricted(self) -> bool:
        return bool(self.allowed_department_ids or self.allowed_employee_ids)

    def allows(self, employee_id: int, department_id: Optional[int]) -> bool:
        if not self.is_restricted():
            return True
        if employee_id in self.allowed_employee_ids:
            return True
        return department_id is not None and department_id in self.allowed_department_ids


@dataclass(frozen=True)
class GeoResolution:
    is_within_any_geofence: bool
    nearest_location: Optional[GeofenceLocation] = None
    distance_m: Optional[int] = None

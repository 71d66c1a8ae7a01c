from __future__ import annotations

import math
from typing import Iterable, Optional

from ..core.constants import EARTH_RADIUS_M
from .model import GeoPoint, GeofenceLocation, GeoResolution


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.longitude - a.longitude)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


class GeoResolver:
    """Finds the office geofence that contains a point, or the closest one.

    Candidates are scanned in location_id order, so exact distance ties go to
    the lowest id and the result does not depend on the order of `locations`.
    """

    def resolve(
        self,
        point: GeoPoint,
        *,
        employee_id: int,
        department_id: Optional[int],
        locations: Iterable[GeofenceLocation],
    ) -> GeoResolution:
        nearest: Optional[GeofenceLocation] = None
        nearest_distance = math.inf
        containing: Optional[GeofenceLocation] = None
        containing_distance = math.inf

        for location in sorted(locations, key=lambda loc: loc.location_id):
            if not location.is_active:
                continue
            if not location.allows(employee_id, department_id):
                continue

            distance = haversine_m(point, location.center)
            if distance < nearest_distance:
                nearest, nearest_distance = location, distance
            if distance <= location.radius_m and distance < containing_distance:
                containing, containing_distance = location, distance

        if containing is not None:
            return GeoResolution(True, containing, int(round(containing_distance)))
        if nearest is not None:
            return GeoResolution(False, nearest, int(round(nearest_distance)))
        return GeoResolution(False, None, None)

from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, load_json
from .model import GeofenceLocation
from .repository import GeofenceRepository


class MySQLGeofenceRepository(GeofenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self, *, company_id: Optional[int] = None) -> Sequence[GeofenceLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT location_id, company_id, name, latitude, longitude, radius_m,
                       allowed_department_ids, allowed_employee_ids, is_active
                FROM geofence_locations
                WHERE is_active=1 AND (company_id IS NULL OR company_id=%s)
                ORDER BY location_id
                """,
                (company_id,),
            )
            rows = fetchall(cur)
        return [
            GeofenceLocation(
                location_id=int(r["location_id"]),
                name=r["name"],
                latitude=float(r["latitude"]),
                longitude=float(r["longitude"]),
                radius_m=float(r["radius_m"]),
                allowed_department_ids=frozenset(int(x) for x in load_json(r.get("allowed_department_ids"), [])),
                allowed_employee_ids=frozenset(int(x) for x in load_json(r.get("allowed_employee_ids"), [])),
                is_active=bool(int(r["is_active"])),
                company_id=None if r.get("company_id") is None else int(r["company_id"]),
            )
            for r in rows
        ]

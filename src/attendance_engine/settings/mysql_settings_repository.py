from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import parse_hhmm
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_bool, load_json, normalize_mysql_time
from .model import BreakWindow, CompanyOverrides, CompanySettings, GeofenceConfig, NotificationPreferences
from .repository import SettingsRepository

_OVERRIDE_COLUMNS = """
    company_id, check_in_time, check_out_time, late_threshold_minutes, full_day_hours, half_day_hours,
    working_days, break_timings, geofence_enabled, geofence_strict_mode, geofence_multiple_locations,
    timezone, absent_threshold_minutes
"""


def _parse_breaks(value: Any) -> Optional[tuple[BreakWindow, ...]]:
    raw = load_json(value)
    if raw is None:
        return None
    return tuple(
        BreakWindow(
            name=str(b.get("name") or "Break"),
            start_time=parse_hhmm(b["startTime"]),
            end_time=parse_hhmm(b["endTime"]),
            days=tuple(str(d).lower() for d in (b.get("days") or ())),
            is_active=bool(b.get("isActive", True)),
        )
        for b in raw
    )


def _parse_days(value: Any) -> Optional[tuple[str, ...]]:
    raw = load_json(value)
    if raw is None:
        return None
    return tuple(str(d).lower() for d in raw)


def _opt_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_global(self) -> CompanySettings:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM company_settings ORDER BY settings_id LIMIT 1")
            r = fetchone(cur)
        if not r:
            return CompanySettings()
        defaults = CompanySettings()
        return CompanySettings(
            check_in_time=normalize_mysql_time(r["check_in_time"]),
            check_out_time=normalize_mysql_time(r["check_out_time"]),
            late_threshold_minutes=int(r["late_threshold_minutes"]),
            full_day_hours=float(r["full_day_hours"]),
            half_day_hours=float(r["half_day_hours"]),
            working_days=_parse_days(r.get("working_days")) or defaults.working_days,
            break_timings=_parse_breaks(r.get("break_timings")) or (),
            geofence=GeofenceConfig(
                enabled=bool(from_db_bool(r["geofence_enabled"])),
                strict_mode=bool(from_db_bool(r["geofence_strict_mode"])),
                use_multiple_locations=bool(from_db_bool(r["geofence_multiple_locations"])),
            ),
            timezone=str(r["timezone"]),
            absent_threshold_minutes=int(r["absent_threshold_minutes"]),
            notifications=NotificationPreferences(
                email_enabled=bool(from_db_bool(r["email_notifications"])),
                push_enabled=bool(from_db_bool(r["push_notifications"])),
                email_on_clock_in=bool(from_db_bool(r["email_on_clock_in"])),
                email_on_present=bool(from_db_bool(r["email_on_present"])),
                email_on_half_day=bool(from_db_bool(r["email_on_half_day"])),
                email_on_absent=bool(from_db_bool(r["email_on_absent"])),
            ),
        )

    def get_company_overrides(self, company_id: int) -> Optional[CompanyOverrides]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_OVERRIDE_COLUMNS} FROM company_working_hours WHERE company_id=%s",
                (int(company_id),),
            )
            r = fetchone(cur)
        return self._to_overrides(r) if r else None

    def list_company_overrides(self) -> Sequence[CompanyOverrides]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_OVERRIDE_COLUMNS} FROM company_working_hours ORDER BY company_id")
            rows = fetchall(cur)
        return [self._to_overrides(r) for r in rows]

    @staticmethod
    def _to_overrides(r: Dict[str, Any]) -> CompanyOverrides:
        geofence = None
        if r.get("geofence_enabled") is not None:
            geofence = GeofenceConfig(
                enabled=bool(from_db_bool(r["geofence_enabled"])),
                strict_mode=bool(from_db_bool(r.get("geofence_strict_mode"))),
                use_multiple_locations=bool(from_db_bool(r.get("geofence_multiple_locations"))),
            )
        return CompanyOverrides(
            company_id=int(r["company_id"]),
            check_in_time=normalize_mysql_time(r.get("check_in_time")),
            check_out_time=normalize_mysql_time(r.get("check_out_time")),
            late_threshold_minutes=_opt_int(r.get("late_threshold_minutes")),
            full_day_hours=_opt_float(r.get("full_day_hours")),
            half_day_hours=_opt_float(r.get("half_day_hours")),
            working_days=_parse_days(r.get("working_days")),
            break_timings=_parse_breaks(r.get("break_timings")),
            geofence=geofence,
            timezone=r.get("timezone"),
            absent_threshold_minutes=_opt_int(r.get("absent_threshold_minutes")),
        )

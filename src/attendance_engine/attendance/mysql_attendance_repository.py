from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus, CheckInStatus, CheckOutStatus
from ..core.exceptions import DuplicateAttendanceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    from_db_datetime,
    load_json,
    to_db_datetime,
)
from .model import AttendanceClosure, AttendanceRecord, LocationStamp
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, check_in_time, check_out_time, check_in_status, check_out_status,
    work_hours, total_logged_hours, break_minutes, shrinkage_percentage, overtime_hours, status, status_reason,
    work_from_home, geofence_validated, check_in_location, check_out_location, remarks, is_manual_entry
"""

# Appends to the remarks audit trail without touching earlier entries.
_APPEND_REMARK = "remarks=IF(%s IS NULL, remarks, IF(remarks IS NULL OR remarks='', %s, CONCAT(remarks, ' | ', %s)))"


def _location_json(stamp: Optional[LocationStamp]) -> Optional[str]:
    return dump_json(stamp.to_dict()) if stamp else None


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in=from_db_datetime(r.get("check_in_time")),
        check_out=from_db_datetime(r.get("check_out_time")),
        check_in_status=CheckInStatus(r["check_in_status"]) if r.get("check_in_status") else None,
        check_out_status=CheckOutStatus(r["check_out_status"]) if r.get("check_out_status") else None,
        work_hours=float(r.get("work_hours") or 0),
        total_logged_hours=float(r.get("total_logged_hours") or 0),
        break_minutes=int(r.get("break_minutes") or 0),
        shrinkage_percentage=float(r.get("shrinkage_percentage") or 0),
        overtime_hours=None if r.get("overtime_hours") is None else float(r["overtime_hours"]),
        status_reason=r.get("status_reason"),
        work_from_home=bool(int(r.get("work_from_home") or 0)),
        geofence_validated=bool(int(r.get("geofence_validated") or 0)),
        check_in_location=LocationStamp.from_dict(load_json(r.get("check_in_location"))),
        check_out_location=LocationStamp.from_dict(load_json(r.get("check_out_location"))),
        remarks=r.get("remarks") or "",
        is_manual_entry=bool(int(r.get("is_manual_entry") or 0)),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
        return _to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
        return _to_record(r) if r else None

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, check_in_time, check_out_time, check_in_status, check_out_status,
                        work_hours, total_logged_hours, break_minutes, shrinkage_percentage, overtime_hours,
                        status, status_reason, work_from_home, geofence_validated, check_in_location,
                        check_out_location, remarks, is_manual_entry
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.employee_id,
                        record.work_date,
                        to_db_datetime(record.check_in),
                        to_db_datetime(record.check_out),
                        record.check_in_status.value if record.check_in_status else None,
                        record.check_out_status.value if record.check_out_status else None,
                        record.work_hours,
                        record.total_logged_hours,
                        record.break_minutes,
                        record.shrinkage_percentage,
                        record.overtime_hours,
                        record.status.value,
                        record.status_reason,
                        int(record.work_from_home),
                        int(record.geofence_validated),
                        _location_json(record.check_in_location),
                        _location_json(record.check_out_location),
                        record.remarks or None,
                        int(record.is_manual_entry),
                    ),
                )
                attendance_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateAttendanceError(
                    f"Attendance already exists for employee {record.employee_id} on {record.work_date}"
                ) from exc
            raise
        return self.get_by_id(attendance_id)

    def record_check_in(
        self,
        *,
        attendance_id: int,
        check_in: datetime,
        check_in_status: CheckInStatus,
        work_from_home: bool,
        geofence_validated: bool,
        location: Optional[LocationStamp] = None,
        status_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_in_status=%s, status=%s, work_from_home=%s,
                    geofence_validated=%s, check_in_location=%s, status_reason=%s
                WHERE attendance_id=%s AND check_in_time IS NULL
                """,
                (
                    to_db_datetime(check_in),
                    check_in_status.value,
                    AttendanceStatus.IN_PROGRESS.value,
                    int(work_from_home),
                    int(geofence_validated),
                    _location_json(location),
                    status_reason,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def close_if_in_progress(self, attendance_id: int, closure: AttendanceClosure) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET check_out_time=%s, check_out_status=%s, status=%s, status_reason=%s,
                    work_hours=%s, total_logged_hours=%s, break_minutes=%s, shrinkage_percentage=%s,
                    overtime_hours=COALESCE(%s, overtime_hours),
                    check_out_location=COALESCE(%s, check_out_location),
                    {_APPEND_REMARK}
                WHERE attendance_id=%s AND status=%s AND check_out_time IS NULL
                """,
                (
                    to_db_datetime(closure.check_out),
                    closure.check_out_status.value,
                    closure.status.value,
                    closure.status_reason,
                    closure.work_hours,
                    closure.total_logged_hours,
                    closure.break_minutes,
                    closure.shrinkage_percentage,
                    closure.overtime_hours,
                    _location_json(closure.check_out_location),
                    closure.remark,
                    closure.remark,
                    closure.remark,
                    int(attendance_id),
                    AttendanceStatus.IN_PROGRESS.value,
                ),
            )
            return cur.rowcount > 0

    def list_in_progress(
        self,
        *,
        work_date: Optional[date] = None,
        before: Optional[date] = None,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["status=%s", "check_in_time IS NOT NULL", "check_out_time IS NULL"]
        params: list[object] = [AttendanceStatus.IN_PROGRESS.value]
        if work_date is not None:
            clauses.append("work_date=%s")
            params.append(work_date)
        if before is not None:
            clauses.append("work_date<%s")
            params.append(before)
        if employee_ids is not None:
            ids = [int(i) for i in employee_ids]
            if not ids:
                return []
            clauses.append(f"employee_id IN ({','.join(['%s'] * len(ids))})")
            params.extend(ids)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY work_date, attendance_id",
                tuple(params),
            )
            rows = fetchall(cur)
        return [_to_record(r) for r in rows]

    def employee_ids_with_record(self, work_date: date) -> set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM attendance_records WHERE work_date=%s", (work_date,))
            rows = fetchall(cur)
        return {int(r["employee_id"]) for r in rows}

    def list_for_date(self, work_date: date, employee_ids: Iterable[int]) -> Sequence[AttendanceRecord]:
        ids = [int(i) for i in employee_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records "
                f"WHERE work_date=%s AND employee_id IN ({','.join(['%s'] * len(ids))})",
                (work_date, *ids),
            )
            rows = fetchall(cur)
        return [_to_record(r) for r in rows]

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        status: AttendanceStatus,
        status_reason: Optional[str],
        work_hours: float,
        total_logged_hours: float,
        break_minutes: int,
        shrinkage_percentage: float,
        remark: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=%s, status=%s, status_reason=%s,
                    work_hours=%s, total_logged_hours=%s, break_minutes=%s, shrinkage_percentage=%s,
                    is_manual_entry=1,
                    {_APPEND_REMARK}
                WHERE attendance_id=%s
                """,
                (
                    to_db_datetime(check_in),
                    to_db_datetime(check_out),
                    status.value,
                    status_reason,
                    work_hours,
                    total_logged_hours,
                    break_minutes,
                    shrinkage_percentage,
                    remark,
                    remark,
                    remark,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE employee_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            rows = fetchall(cur)
        return [_to_record(r) for r in rows]

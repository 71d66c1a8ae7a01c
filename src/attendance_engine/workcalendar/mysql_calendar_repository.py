from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ApprovedLeave, Holiday
from .repository import HolidayRepository, LeaveRepository


def _to_leave(r: Dict[str, Any]) -> ApprovedLeave:
    return ApprovedLeave(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        work_from_home=bool(int(r.get("work_from_home") or 0)),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_approved_for(self, employee_id: int, day: date) -> Optional[ApprovedLeave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_id, employee_id, start_date, end_date, work_from_home
                FROM leaves
                WHERE employee_id=%s AND status='approved' AND start_date<=%s AND end_date>=%s
                ORDER BY work_from_home ASC, leave_id ASC
                LIMIT 1
                """,
                (int(employee_id), day, day),
            )
            r = fetchone(cur)
        return _to_leave(r) if r else None

    def list_approved_on(self, day: date) -> Sequence[ApprovedLeave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_id, employee_id, start_date, end_date, work_from_home
                FROM leaves
                WHERE status='approved' AND start_date<=%s AND end_date>=%s
                ORDER BY employee_id, work_from_home ASC
                """,
                (day, day),
            )
            rows = fetchall(cur)
        return [_to_leave(r) for r in rows]


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_on(self, day: date, *, company_id: Optional[int] = None) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, name, start_date, end_date, company_id, is_active
                FROM holidays
                WHERE is_active=1 AND start_date<=%s AND end_date>=%s
                  AND (company_id IS NULL OR company_id=%s)
                ORDER BY holiday_id
                LIMIT 1
                """,
                (day, day, company_id),
            )
            r = fetchone(cur)
        if not r:
            return None
        return Holiday(
            holiday_id=int(r["holiday_id"]),
            name=r["name"],
            start_date=r["start_date"],
            end_date=r["end_date"],
            company_id=None if r.get("company_id") is None else int(r["company_id"]),
            is_active=bool(int(r["is_active"])),
        )

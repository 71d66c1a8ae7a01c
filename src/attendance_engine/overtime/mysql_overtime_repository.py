from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Sequence

from ..core.enums import OvertimeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import OPEN_STATUSES, OvertimeRequest
from .repository import OvertimeRepository

_COLUMNS = """
    request_id, employee_id, attendance_id, work_date, scheduled_check_out, prompt_sent_at,
    status, overtime_hours, responded_at, auto_checkout_at
"""


def _to_request(r: Dict[str, Any]) -> OvertimeRequest:
    return OvertimeRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        attendance_id=int(r["attendance_id"]),
        work_date=r["work_date"],
        scheduled_check_out=from_db_datetime(r["scheduled_check_out"]),
        prompt_sent_at=from_db_datetime(r["prompt_sent_at"]),
        status=OvertimeStatus(r["status"]),
        overtime_hours=None if r.get("overtime_hours") is None else float(r["overtime_hours"]),
        responded_at=from_db_datetime(r.get("responded_at")),
        auto_checkout_at=from_db_datetime(r.get("auto_checkout_at")),
    )


class MySQLOvertimeRepository(OvertimeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, request: OvertimeRequest) -> OvertimeRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO overtime_requests(employee_id, attendance_id, work_date, scheduled_check_out, prompt_sent_at, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    request.employee_id,
                    request.attendance_id,
                    request.work_date,
                    to_db_datetime(request.scheduled_check_out),
                    to_db_datetime(request.prompt_sent_at),
                    request.status.value,
                ),
            )
            request_id = int(cur.lastrowid)
        return self.get_by_id(request_id)

    def get_by_id(self, request_id: int) -> Optional[OvertimeRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM overtime_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
        return _to_request(r) if r else None

    def get_open_for_attendance(self, attendance_id: int) -> Optional[OvertimeRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM overtime_requests
                WHERE attendance_id=%s AND status IN (%s, %s)
                ORDER BY request_id DESC
                LIMIT 1
                """,
                (int(attendance_id), *[s.value for s in OPEN_STATUSES]),
            )
            r = fetchone(cur)
        return _to_request(r) if r else None

    def transition(
        self,
        request_id: int,
        *,
        from_statuses: Iterable[OvertimeStatus],
        to_status: OvertimeStatus,
        overtime_hours: Optional[float] = None,
        responded_at: Optional[datetime] = None,
        auto_checkout_at: Optional[datetime] = None,
    ) -> bool:
        statuses = [s.value for s in from_statuses]
        placeholders = ",".join(["%s"] * len(statuses))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE overtime_requests
                SET status=%s,
                    overtime_hours=COALESCE(%s, overtime_hours),
                    responded_at=COALESCE(%s, responded_at),
                    auto_checkout_at=COALESCE(%s, auto_checkout_at)
                WHERE request_id=%s AND status IN ({placeholders})
                """,
                (
                    to_status.value,
                    overtime_hours,
                    to_db_datetime(responded_at),
                    to_db_datetime(auto_checkout_at),
                    int(request_id),
                    *statuses,
                ),
            )
            return cur.rowcount > 0

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[OvertimeStatus] = None,
        limit: int = 10,
    ) -> Sequence[OvertimeRequest]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        params.append(int(limit))
        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM overtime_requests
                WHERE {where}
                ORDER BY prompt_sent_at DESC
                LIMIT %s
                """,
                tuple(params),
            )
            rows = fetchall(cur)
        return [_to_request(r) for r in rows]

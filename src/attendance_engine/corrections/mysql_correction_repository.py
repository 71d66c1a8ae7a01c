from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, CorrectionStatus, CorrectionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import AttendanceCorrection
from .repository import CorrectionRepository

_COLUMNS = """
    correction_id, employee_id, attendance_id, work_date, correction_type, requested_check_in,
    requested_check_out, requested_status, reason, status, reviewed_by, reviewed_at, reviewer_comments, created_at
"""


def _to_correction(r: Dict[str, Any]) -> AttendanceCorrection:
    return AttendanceCorrection(
        correction_id=int(r["correction_id"]),
        employee_id=int(r["employee_id"]),
        attendance_id=int(r["attendance_id"]),
        work_date=r["work_date"],
        correction_type=CorrectionType(r["correction_type"]),
        reason=r["reason"],
        created_at=from_db_datetime(r["created_at"]),
        requested_check_in=from_db_datetime(r.get("requested_check_in")),
        requested_check_out=from_db_datetime(r.get("requested_check_out")),
        requested_status=AttendanceStatus(r["requested_status"]) if r.get("requested_status") else None,
        status=CorrectionStatus(r["status"]),
        reviewed_by=None if r.get("reviewed_by") is None else int(r["reviewed_by"]),
        reviewed_at=from_db_datetime(r.get("reviewed_at")),
        reviewer_comments=r.get("reviewer_comments"),
    )


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, correction: AttendanceCorrection) -> AttendanceCorrection:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_corrections(
                    employee_id, attendance_id, work_date, correction_type, requested_check_in,
                    requested_check_out, requested_status, reason, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    correction.employee_id,
                    correction.attendance_id,
                    correction.work_date,
                    correction.correction_type.value,
                    to_db_datetime(correction.requested_check_in),
                    to_db_datetime(correction.requested_check_out),
                    correction.requested_status.value if correction.requested_status else None,
                    correction.reason,
                    correction.status.value,
                    to_db_datetime(correction.created_at),
                ),
            )
            correction_id = int(cur.lastrowid)
        return self.get_by_id(correction_id)

    def get_by_id(self, correction_id: int) -> Optional[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_corrections WHERE correction_id=%s", (int(correction_id),))
            r = fetchone(cur)
        return _to_correction(r) if r else None

    def get_pending_for_attendance(self, attendance_id: int) -> Optional[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_corrections WHERE attendance_id=%s AND status=%s LIMIT 1",
                (int(attendance_id), CorrectionStatus.PENDING.value),
            )
            r = fetchone(cur)
        return _to_correction(r) if r else None

    def decide(
        self,
        correction_id: int,
        *,
        status: CorrectionStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        comments: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_corrections
                SET status=%s, reviewed_by=%s, reviewed_at=%s, reviewer_comments=%s
                WHERE correction_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    to_db_datetime(reviewed_at),
                    comments,
                    int(correction_id),
                    CorrectionStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_corrections(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[CorrectionStatus] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceCorrection]:
        clauses = ["1=1"]
        params: list[object] = []
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        params.append(int(limit))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_corrections WHERE {where} ORDER BY created_at DESC LIMIT %s",
                tuple(params),
            )
            rows = fetchall(cur)
        return [_to_correction(r) for r in rows]

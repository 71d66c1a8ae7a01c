from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, user_id, first_name, last_name, email, department_id, company_id,
    reporting_manager_id, role, is_active
"""


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
        return self._to_employee(r) if r else None

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE is_active=1 ORDER BY employee_id")
            rows = fetchall(cur)
        return [self._to_employee(r) for r in rows]

    @staticmethod
    def _to_employee(r: Dict[str, Any]) -> Employee:
        return Employee(
            employee_id=int(r["employee_id"]),
            user_id=int(r["user_id"]),
            first_name=r["first_name"],
            last_name=r.get("last_name") or "",
            email=r.get("email"),
            department_id=_opt_int(r.get("department_id")),
            company_id=_opt_int(r.get("company_id")),
            reporting_manager_id=_opt_int(r.get("reporting_manager_id")),
            role=Role(r.get("role") or Role.EMPLOYEE.value),
            is_active=bool(int(r.get("is_active", 1))),
        )

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role

# Roles that see and review every employee, not only their reports.
ORG_WIDE_ROLES = (Role.ADMIN, Role.HR)


@dataclass(frozen=True)
class Employee:
    """Attendance-relevant view of an employee."""

    employee_id: int
    user_id: int
    first_name: str
    last_name: str = ""
    email: Optional[str] = None
    department_id: Optional[int] = None
    company_id: Optional[int] = None
    reporting_manager_id: Optional[int] = None
    role: Role = Role.EMPLOYEE
    is_active: bool = True

    @property
    def has_org_wide_access(self) -> bool:
        return self.role in ORG_WIDE_ROLES

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

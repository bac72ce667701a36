from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import EmployeeStatus, Role


@dataclass(frozen=True)
class Employee:
    """Read-only view of an employee owned by the account service."""

    employee_id: int
    employee_code: str
    first_name: str
    last_name: str
    department: str
    status: EmployeeStatus
    user_id: Optional[int] = None
    role: Optional[Role] = None

    @property
    def is_eligible(self) -> bool:
        """Active, linked to an account, and not an admin."""
        return self.status == EmployeeStatus.ACTIVE and self.user_id is not None and self.role != Role.ADMIN

    def projection(self) -> dict:
        return {
            "id": self.employee_id,
            "employeeId": self.employee_code,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "department": self.department,
        }

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Read-only access to employees.

    Note: employees are managed elsewhere; this core never writes them.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_eligible(self) -> Sequence[Employee]:
        """Active, non-admin employees with a linked account."""

        raise NotImplementedError

    def count_eligible(self, *, department: Optional[str] = None) -> int:
        raise NotImplementedError

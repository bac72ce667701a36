from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EmployeeStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_SELECT = """
    SELECT e.employee_id, e.employee_code, e.first_name, e.last_name,
           e.department, e.status, e.user_id, u.role
    FROM employees e
    LEFT JOIN users u ON u.user_id = e.user_id
"""

_ELIGIBLE = "e.status=%s AND e.user_id IS NOT NULL AND u.role <> %s"


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_code=r["employee_code"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        department=r["department"],
        status=EmployeeStatus(r["status"]),
        user_id=int(r["user_id"]) if r.get("user_id") is not None else None,
        role=Role(r["role"]) if r.get("role") else None,
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_eligible(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {_ELIGIBLE} ORDER BY e.employee_id",
                (EmployeeStatus.ACTIVE.value, Role.ADMIN.value),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def count_eligible(self, *, department: Optional[str] = None) -> int:
        clauses = [_ELIGIBLE]
        params: list[object] = [EmployeeStatus.ACTIVE.value, Role.ADMIN.value]
        if department:
            clauses.append("e.department=%s")
            params.append(department)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM employees e
                JOIN users u ON u.user_id = e.user_id
                WHERE {" AND ".join(clauses)}
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_datetime,
    normalize_mysql_date,
    to_db_datetime,
)
from .model import (
    AttendancePatch,
    AttendanceRecord,
    AttendanceReportRow,
    BulkUpdateResult,
    InsertResult,
    NewAttendance,
)
from .repository import AttendanceRepository

_COLUMNS = "ar.attendance_id, ar.employee_id, ar.shift_date, ar.clock_in, ar.clock_out, ar.status, ar.auto_marked, ar.auto_closed, ar.notes"
_OPEN = "ar.clock_in IS NOT NULL AND ar.clock_out IS NULL"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        shift_date=normalize_mysql_date(r["shift_date"]),
        clock_in=from_db_datetime(r.get("clock_in")),
        clock_out=from_db_datetime(r.get("clock_out")),
        status=AttendanceStatus(r["status"]),
        auto_marked=bool(r.get("auto_marked")),
        auto_closed=bool(r.get("auto_closed")),
        notes=r.get("notes"),
    )


def _patch_assignments(patch: AttendancePatch) -> tuple[list[str], list[object]]:
    sets: list[str] = []
    params: list[object] = []
    for name, value in patch.changes().items():
        if name in ("clock_in", "clock_out"):
            value = to_db_datetime(value)
        elif name == "status":
            value = AttendanceStatus(value).value
        elif name == "auto_closed":
            value = 1 if value else 0
        sets.append(f"{name}=%s")
        params.append(value)

    if patch.append_note:
        sets.append("notes=CONCAT_WS('\\n', NULLIF(notes, ''), %s)")
        params.append(patch.append_note)
    return sets, params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_if_absent(self, new: NewAttendance) -> InsertResult:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(employee_id, shift_date, clock_in, status, auto_marked, notes)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(new.employee_id),
                        new.shift_date,
                        to_db_datetime(new.clock_in),
                        new.status.value,
                        1 if new.auto_marked else 0,
                        new.notes,
                    ),
                )
                created = True
                attendance_id = int(cur.lastrowid)
            except mysql_errors.IntegrityError as e:
                # Another writer owns the (employee_id, shift_date) key.
                if e.errno != errorcode.ER_DUP_ENTRY:
                    raise
                created = False
                attendance_id = None

            if attendance_id is not None:
                cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s", (attendance_id,))
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.employee_id=%s AND ar.shift_date=%s",
                    (int(new.employee_id), new.shift_date),
                )
            r = fetchone(cur)
            if not r:
                raise RuntimeError(
                    f"attendance record for employee {new.employee_id} on {new.shift_date} vanished after insert"
                )
            return InsertResult(created=created, record=_to_record(r))

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, shift_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.employee_id=%s AND ar.shift_date=%s",
                (int(employee_id), shift_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_open_session(self, employee_id: int, shift_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records ar
                WHERE ar.employee_id=%s AND ar.shift_date=%s AND {_OPEN}
                """,
                (int(employee_id), shift_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def claim_placeholder(self, *, attendance_id: int, clock_in: datetime, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_in=%s, status=%s
                WHERE attendance_id=%s AND clock_in IS NULL AND clock_out IS NULL
                """,
                (to_db_datetime(clock_in), status.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_by_id(
        self,
        attendance_id: int,
        patch: AttendancePatch,
        *,
        only_if_open: bool = False,
    ) -> Optional[AttendanceRecord]:
        sets, params = _patch_assignments(patch)

        with db_cursor(self._conn_factory) as (_, cur):
            if sets:
                where = "attendance_id=%s"
                if only_if_open:
                    where += " AND clock_in IS NOT NULL AND clock_out IS NULL"
                cur.execute(
                    f"UPDATE attendance_records SET {', '.join(sets)} WHERE {where}",
                    tuple(params) + (int(attendance_id),),
                )
                if only_if_open and cur.rowcount == 0:
                    return None

            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def bulk_update(self, items: Sequence[tuple[int, AttendancePatch]]) -> BulkUpdateResult:
        matched = 0
        modified = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for attendance_id, patch in items:
                cur.execute("SELECT 1 AS found FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
                if not fetchone(cur):
                    continue
                matched += 1

                sets, params = _patch_assignments(patch)
                if not sets:
                    continue
                cur.execute(
                    f"UPDATE attendance_records SET {', '.join(sets)} WHERE attendance_id=%s",
                    tuple(params) + (int(attendance_id),),
                )
                if cur.rowcount > 0:
                    modified += 1
        return BulkUpdateResult(matched_count=matched, modified_count=modified)

    def list_by_shift_date(
        self,
        shift_date: date,
        *,
        open_only: bool = False,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["ar.shift_date=%s"]
        params: list[object] = [shift_date]
        if open_only:
            clauses.append(_OPEN)
        if status is not None:
            clauses.append("ar.status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records ar
                WHERE {" AND ".join(clauses)}
                ORDER BY ar.attendance_id
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_by_date_range(
        self,
        start: date,
        end: date,
        *,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["ar.shift_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if employee_id is not None:
            clauses.append("ar.employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("ar.status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records ar
                WHERE {" AND ".join(clauses)}
                ORDER BY ar.shift_date DESC, ar.employee_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def aggregate_status_counts(
        self,
        *,
        start: date,
        end: date,
        department: Optional[str] = None,
    ) -> dict[AttendanceStatus, int]:
        clauses = ["ar.shift_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if department:
            clauses.append("e.department=%s")
            params.append(department)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ar.status, COUNT(*) AS total
                FROM attendance_records ar
                JOIN employees e ON e.employee_id = ar.employee_id
                WHERE {" AND ".join(clauses)}
                GROUP BY ar.status
                """,
                tuple(params),
            )
            counts = {s: 0 for s in AttendanceStatus}
            for r in fetchall(cur):
                counts[AttendanceStatus(r["status"])] = int(r["total"])
            return counts

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        department: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.shift_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if department:
            clauses.append("e.department=%s")
            params.append(department)
        if status is not None:
            clauses.append("ar.status=%s")
            params.append(status.value)
        if employee_id is not None:
            clauses.append("ar.employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    {_COLUMNS},
                    e.employee_code, e.first_name, e.last_name, e.department
                FROM attendance_records ar
                JOIN employees e ON e.employee_id = ar.employee_id
                WHERE {where}
                ORDER BY ar.shift_date DESC, e.employee_id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceReportRow(
                    record=_to_record(r),
                    employee_code=r["employee_code"],
                    first_name=r["first_name"],
                    last_name=r["last_name"],
                    department=r["department"],
                )
                for r in rows
            ]

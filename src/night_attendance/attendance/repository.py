from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import (
    AttendancePatch,
    AttendanceRecord,
    AttendanceReportRow,
    BulkUpdateResult,
    InsertResult,
    NewAttendance,
)


class AttendanceRepository(Protocol):
    """Attendance store.

    The store enforces one record per (employee_id, shift_date). Existence
    decisions go through `insert_if_absent`, never through a read followed by
    a write.
    """

    def insert_if_absent(self, new: NewAttendance) -> InsertResult:
        """Atomically create the record unless one exists for the same key.

        A duplicate key is the `created=False` outcome, not an error.
        """

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, shift_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_open_session(self, employee_id: int, shift_date: date) -> Optional[AttendanceRecord]:
        """Record with clock_in set and clock_out unset."""

        raise NotImplementedError

    def claim_placeholder(self, *, attendance_id: int, clock_in: datetime, status: AttendanceStatus) -> bool:
        """Turn a seeded absence into an open session.

        Single conditional update that only applies while clock_in is unset.
        """

        raise NotImplementedError

    def update_by_id(
        self,
        attendance_id: int,
        patch: AttendancePatch,
        *,
        only_if_open: bool = False,
    ) -> Optional[AttendanceRecord]:
        """Apply `patch` to one record.

        Returns the updated record, or None when nothing matched (unknown id,
        or the session was no longer open with `only_if_open`).
        """

        raise NotImplementedError

    def bulk_update(self, items: Sequence[tuple[int, AttendancePatch]]) -> BulkUpdateResult:
        raise NotImplementedError

    def list_by_shift_date(
        self,
        shift_date: date,
        *,
        open_only: bool = False,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_by_date_range(
        self,
        start: date,
        end: date,
        *,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def aggregate_status_counts(
        self,
        *,
        start: date,
        end: date,
        department: Optional[str] = None,
    ) -> dict[AttendanceStatus, int]:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        department: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError

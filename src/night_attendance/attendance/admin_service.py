from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.enums import AttendanceStatus
from ..core.exceptions import RecordNotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..shifts.calendar import ShiftCalendar
from .model import AttendancePatch, AttendanceRecord, AttendanceReportRow, BulkUpdateResult
from .repository import AttendanceRepository


def _check_consistency(*, status, clock_in, clock_out) -> None:
    if clock_out is not None and clock_in is None:
        raise ValidationError("clockOut requires clockIn")
    if clock_in is not None and clock_out is not None and clock_out < clock_in:
        raise ValidationError("clockOut cannot be earlier than clockIn")
    if status == AttendanceStatus.ABSENT and (clock_in is not None or clock_out is not None):
        raise ValidationError("Absent records cannot carry clock times")


class AttendanceAdminService:
    """Use case: admin listing, corrections and per-shift summaries."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        calendar: ShiftCalendar,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._employees = employees
        self._calendar = calendar
        self._clock = clock

    def resolve_range(
        self,
        *,
        on_date: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> tuple[date, date]:
        """A single date, an inclusive range, or the current shift date."""

        if on_date is not None:
            return on_date, on_date
        if start is None and end is None:
            current = self._calendar.shift_date_of(self._clock())
            return current, current
        if start is None or end is None:
            raise ValidationError("start and end must be provided together")
        if start > end:
            raise ValidationError("start must not be after end")
        return start, end

    def list_attendance(
        self,
        *,
        on_date: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        department: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceReportRow]:
        start, end = self.resolve_range(on_date=on_date, start=start, end=end)
        return self._attendance.get_report_rows(
            start_date=start,
            end_date=end,
            department=department or None,
            status=status,
        )

    def update_record(self, attendance_id: int, patch: AttendancePatch) -> AttendanceRecord:
        current = self._attendance.get_by_id(attendance_id)
        if not current:
            raise RecordNotFoundError()

        changes = patch.changes()
        _check_consistency(
            status=changes.get("status", current.status),
            clock_in=changes.get("clock_in", current.clock_in),
            clock_out=changes.get("clock_out", current.clock_out),
        )

        updated = self._attendance.update_by_id(attendance_id, patch)
        if not updated:
            raise RecordNotFoundError()
        return updated

    def bulk_update(self, items: Sequence[tuple[int, AttendancePatch]]) -> BulkUpdateResult:
        if not items:
            raise ValidationError("No records to update")

        for attendance_id, patch in items:
            changes = patch.changes()
            if "status" not in changes:
                raise ValidationError(f"Record {attendance_id}: status is required")
            current = self._attendance.get_by_id(attendance_id)
            if current is None:
                # Reported as unmatched by the store.
                continue
            _check_consistency(
                status=changes["status"],
                clock_in=changes.get("clock_in", current.clock_in),
                clock_out=changes.get("clock_out", current.clock_out),
            )
        return self._attendance.bulk_update(items)

    def summary(
        self,
        *,
        on_date: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        department: Optional[str] = None,
    ) -> dict:
        start, end = self.resolve_range(on_date=on_date, start=start, end=end)
        counts = self._attendance.aggregate_status_counts(start=start, end=end, department=department or None)
        out = {s.value: int(counts.get(s, 0)) for s in AttendanceStatus}
        out["totalEmployees"] = self._employees.count_eligible(department=department or None)
        return out

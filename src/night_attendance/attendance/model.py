from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (employee, shift date)."""

    attendance_id: int
    employee_id: int
    shift_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    status: AttendanceStatus
    auto_marked: bool = False
    auto_closed: bool = False
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    @property
    def is_placeholder(self) -> bool:
        """Seeded absence that nobody has claimed by clocking in."""
        return self.clock_in is None and self.clock_out is None


@dataclass(frozen=True)
class NewAttendance:
    """Initial values for insert-if-absent."""

    employee_id: int
    shift_date: date
    status: AttendanceStatus
    clock_in: Optional[datetime] = None
    auto_marked: bool = False
    notes: Optional[str] = None


@dataclass(frozen=True)
class InsertResult:
    """Tagged outcome of insert-if-absent: `created` or the existing winner."""

    created: bool
    record: AttendanceRecord


_UNSET = object()


@dataclass(frozen=True)
class AttendancePatch:
    """Fields to change on one record, addressed by id.

    Fields left at the sentinel are untouched; `append_note` is added to the
    existing notes instead of replacing them.
    """

    status: object = field(default=_UNSET)
    clock_in: object = field(default=_UNSET)
    clock_out: object = field(default=_UNSET)
    auto_closed: object = field(default=_UNSET)
    notes: object = field(default=_UNSET)
    append_note: Optional[str] = None

    def changes(self) -> dict:
        names = ("status", "clock_in", "clock_out", "auto_closed", "notes")
        return {name: getattr(self, name) for name in names if getattr(self, name) is not _UNSET}

    def is_empty(self) -> bool:
        return not self.changes() and not self.append_note


@dataclass(frozen=True)
class BulkUpdateResult:
    matched_count: int
    modified_count: int


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for admin listings (record joined with the employee projection)."""

    record: AttendanceRecord
    employee_code: str
    first_name: str
    last_name: str
    department: str

    def employee_projection(self) -> dict:
        return {
            "id": self.record.employee_id,
            "employeeId": self.employee_code,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "department": self.department,
        }

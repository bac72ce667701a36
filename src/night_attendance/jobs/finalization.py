from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendancePatch, AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc
from ..core.constants import AUTO_CLOCK_OUT_NOTE
from ..core.enums import AttendanceStatus
from ..core.exceptions import StoreUnavailableError, ValidationError
from ..shifts.calendar import ShiftCalendar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftSummary:
    total: int
    present: int
    absent: int
    late: int
    half_day: int
    auto_marked: int
    auto_closed: int

    @classmethod
    def from_records(cls, records: Sequence[AttendanceRecord]) -> "ShiftSummary":
        def count(status: AttendanceStatus) -> int:
            return sum(1 for r in records if r.status == status)

        return cls(
            total=len(records),
            present=count(AttendanceStatus.PRESENT),
            absent=count(AttendanceStatus.ABSENT),
            late=count(AttendanceStatus.LATE),
            half_day=count(AttendanceStatus.HALF_DAY),
            auto_marked=sum(1 for r in records if r.auto_marked),
            auto_closed=sum(1 for r in records if r.auto_closed),
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "Present": self.present,
            "Absent": self.absent,
            "Late": self.late,
            "Half-day": self.half_day,
            "autoMarked": self.auto_marked,
            "autoClosed": self.auto_closed,
        }


@dataclass(frozen=True)
class RecordFailure:
    attendance_id: int
    error: str


@dataclass(frozen=True)
class FinalizationResult:
    shift_date: date
    open_sessions: int
    closed: int
    skipped: int
    errors: int
    summary: ShiftSummary
    failures: list[RecordFailure] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "shiftDate": self.shift_date.isoformat(),
            "openSessions": self.open_sessions,
            "closed": self.closed,
            "skipped": self.skipped,
            "errors": self.errors,
            "summary": self.summary.to_dict(),
            "failures": [{"attendanceId": f.attendance_id, "error": f.error} for f in self.failures],
        }


class FinalizationJob:
    """Closes sessions left open when the shift ended and summarizes the shift.

    Closed sessions get the canonical window-close instant as clock-out, not
    the job's own run time.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        calendar: ShiftCalendar,
        *,
        min_work_threshold: timedelta,
        clock: Callable[[], datetime] = now_utc,
        log: Optional[logging.Logger] = None,
    ):
        self._attendance = attendance
        self._calendar = calendar
        self._min_work = min_work_threshold
        self._clock = clock
        self._log = log or logger

    def run(self, trigger_instant: Optional[datetime] = None) -> FinalizationResult:
        trigger_instant = trigger_instant or self._clock()
        # The shift ending now started the previous local day.
        shift_date = self._calendar.local_date(trigger_instant) - timedelta(days=1)
        close_at = self._calendar.window_close_for(shift_date)
        if trigger_instant < close_at:
            raise ValidationError(
                f"Shift {shift_date} is still running until {close_at.isoformat()}; finalize after it ends"
            )

        open_sessions = self._attendance.list_by_shift_date(shift_date, open_only=True)
        self._log.info("Finalizing shift %s: %d open sessions", shift_date, len(open_sessions))

        closed = 0
        skipped = 0
        failures: list[RecordFailure] = []

        for record in open_sessions:
            worked = trigger_instant - record.clock_in
            if worked < self._min_work:
                self._log.info(
                    "Leaving record %s open: worked %s is under the %s minimum",
                    record.attendance_id, worked, self._min_work,
                )
                skipped += 1
                continue

            try:
                updated = self._attendance.update_by_id(
                    record.attendance_id,
                    AttendancePatch(
                        clock_out=max(close_at, record.clock_in),
                        auto_closed=True,
                        append_note=AUTO_CLOCK_OUT_NOTE,
                    ),
                    only_if_open=True,
                )
            except StoreUnavailableError:
                raise
            except Exception as e:
                self._log.error("Auto clock-out failed for record %s: %s", record.attendance_id, e)
                failures.append(RecordFailure(attendance_id=record.attendance_id, error=str(e)))
                continue

            if updated is None:
                # Employee clocked out between the listing and the update.
                skipped += 1
            else:
                closed += 1

        summary = ShiftSummary.from_records(self._attendance.list_by_shift_date(shift_date))
        return FinalizationResult(
            shift_date=shift_date,
            open_sessions=len(open_sessions),
            closed=closed,
            skipped=skipped,
            errors=len(failures),
            summary=summary,
            failures=failures,
        )

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..core.exceptions import (
    AlreadyClockedInTodayError,
    AlreadyClockedOutTodayError,
    EmployeeNotFoundError,
    NoActiveSessionError,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..shifts.calendar import ShiftCalendar
from ..window.policy import TimeWindowPolicy
from .calculator import StandardWorkedTimeCalculator, WorkedTimeCalculator
from .factory import CheckinStrategyFactory
from .model import AttendancePatch, AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockInResult:
    record: AttendanceRecord
    employee: Employee


@dataclass(frozen=True)
class ClockOutResult:
    record: AttendanceRecord
    hours_worked: float


@dataclass(frozen=True)
class AttendanceStatusView:
    shift_date: date
    has_record: bool
    is_clocked_in: bool
    is_clocked_out: bool
    record: Optional[AttendanceRecord]


class ClockingService:
    """Use case: employee-initiated clock-in / clock-out, once per shift.

    Per (employee, shift date) a record goes NoRecord -> open -> closed, or
    NoRecord -> seeded absence -> open -> closed when seeding ran first.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        window: TimeWindowPolicy,
        calendar: ShiftCalendar,
        *,
        strategy_factory: Optional[CheckinStrategyFactory] = None,
        calculator: Optional[WorkedTimeCalculator] = None,
        clock: Callable[[], datetime] = now_utc,
        log: Optional[logging.Logger] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._window = window
        self._calendar = calendar
        self._factory = strategy_factory or CheckinStrategyFactory()
        self._calculator = calculator or StandardWorkedTimeCalculator()
        self._clock = clock
        self._log = log or logger

    def clock_in(self, employee_id: int, *, now: Optional[datetime] = None) -> ClockInResult:
        now = now or self._clock()
        self._window.ensure_within_window(now)

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise EmployeeNotFoundError()

        shift_date = self._calendar.shift_date_of(now)
        shift_start = self._calendar.shift_start_for(shift_date)
        strategy = self._factory.for_checkin(now=now, shift_start=shift_start)
        decision = strategy.decide_checkin(now=now, shift_start=shift_start)

        result = self._attendance.insert_if_absent(
            NewAttendance(
                employee_id=employee.employee_id,
                shift_date=shift_date,
                status=decision.status,
                clock_in=now,
                notes=decision.note,
            )
        )
        if result.created:
            self._log.info(
                "Clock-in employee=%s shift_date=%s status=%s",
                employee.employee_id, shift_date, decision.status.value,
            )
            return ClockInResult(record=result.record, employee=employee)

        existing = result.record
        self._raise_if_started(existing)

        # Seeded absence: claim it with one conditional update.
        if self._attendance.claim_placeholder(
            attendance_id=existing.attendance_id,
            clock_in=now,
            status=decision.status,
        ):
            record = self._attendance.get_by_id(existing.attendance_id)
            self._log.info(
                "Clock-in over seeded absence employee=%s shift_date=%s status=%s",
                employee.employee_id, shift_date, decision.status.value,
            )
            return ClockInResult(record=record, employee=employee)

        # A concurrent clock-in claimed the placeholder first.
        current = self._attendance.get_by_id(existing.attendance_id)
        if current is not None:
            self._raise_if_started(current)
        raise AlreadyClockedInTodayError()

    def clock_out(self, employee_id: int, *, now: Optional[datetime] = None) -> ClockOutResult:
        now = now or self._clock()
        self._window.ensure_within_window(now)

        shift_date = self._calendar.shift_date_of(now)
        record = self._attendance.find_open_session(employee_id, shift_date)
        if not record:
            raise NoActiveSessionError()
        if now < record.clock_in:
            raise ValidationError("Clock-out cannot be earlier than clock-in")

        updated = self._attendance.update_by_id(
            record.attendance_id,
            AttendancePatch(clock_out=now),
            only_if_open=True,
        )
        if updated is None:
            # Closed by a concurrent clock-out or the finalization sweep.
            raise NoActiveSessionError()

        hours = self._calculator.worked_hours(updated)
        self._log.info("Clock-out employee=%s shift_date=%s hours=%.2f", employee_id, shift_date, hours)
        return ClockOutResult(record=updated, hours_worked=hours)

    def get_status(self, employee_id: int, *, now: Optional[datetime] = None) -> AttendanceStatusView:
        now = now or self._clock()
        shift_date = self._calendar.shift_date_of(now)
        record = self._attendance.get_for_employee_and_date(employee_id, shift_date)
        return AttendanceStatusView(
            shift_date=shift_date,
            has_record=record is not None,
            is_clocked_in=bool(record and record.clock_in is not None),
            is_clocked_out=bool(record and record.clock_out is not None),
            record=record,
        )

    def worked_hours(self, record: AttendanceRecord) -> float:
        return self._calculator.worked_hours(record)

    @staticmethod
    def _raise_if_started(record: AttendanceRecord) -> None:
        if record.clock_out is not None:
            raise AlreadyClockedOutTodayError()
        if record.clock_in is not None:
            raise AlreadyClockedInTodayError()

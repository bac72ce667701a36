from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional

from ..attendance.model import NewAttendance
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc
from ..core.constants import SEEDED_ABSENCE_NOTE
from ..core.enums import AttendanceStatus
from ..core.exceptions import StoreUnavailableError
from ..employees.repository import EmployeeRepository
from ..shifts.calendar import ShiftCalendar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemFailure:
    employee_id: int
    error: str


@dataclass(frozen=True)
class SeedingResult:
    shift_date: date
    total_eligible: int
    created: int
    already_present: int
    errors: int
    failures: list[ItemFailure] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "shiftDate": self.shift_date.isoformat(),
            "totalEligible": self.total_eligible,
            "created": self.created,
            "alreadyPresent": self.already_present,
            "errors": self.errors,
            "failures": [{"employeeId": f.employee_id, "error": f.error} for f in self.failures],
        }


class AbsenceSeedingJob:
    """Seeds an Absent placeholder for every eligible employee at shift start.

    Safe to run repeatedly for the same shift date: existing records, whether
    from an earlier run or an early clock-in, are counted and left untouched.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        calendar: ShiftCalendar,
        *,
        clock: Callable[[], datetime] = now_utc,
        log: Optional[logging.Logger] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._calendar = calendar
        self._clock = clock
        self._log = log or logger

    def run(self, trigger_instant: Optional[datetime] = None) -> SeedingResult:
        trigger_instant = trigger_instant or self._clock()
        # The shift beginning now is keyed by today's local date.
        shift_date = self._calendar.local_date(trigger_instant)

        employees = self._employees.list_eligible()
        self._log.info("Seeding absences for shift %s: %d eligible employees", shift_date, len(employees))

        created = 0
        already_present = 0
        failures: list[ItemFailure] = []

        for employee in employees:
            try:
                result = self._attendance.insert_if_absent(
                    NewAttendance(
                        employee_id=employee.employee_id,
                        shift_date=shift_date,
                        status=AttendanceStatus.ABSENT,
                        auto_marked=True,
                        notes=SEEDED_ABSENCE_NOTE,
                    )
                )
            except StoreUnavailableError:
                raise
            except Exception as e:
                self._log.error("Seeding failed for employee %s: %s", employee.employee_id, e)
                failures.append(ItemFailure(employee_id=employee.employee_id, error=str(e)))
                continue

            if result.created:
                created += 1
            else:
                already_present += 1

        return SeedingResult(
            shift_date=shift_date,
            total_eligible=len(employees),
            created=created,
            already_present=already_present,
            errors=len(failures),
            failures=failures,
        )

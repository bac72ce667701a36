from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.admin_service import AttendanceAdminService
from .attendance.calculator import StandardWorkedTimeCalculator
from .attendance.factory import CheckinStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import ClockingService
from .common.datetime_utils import now_utc
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .jobs.absence_seeding import AbsenceSeedingJob
from .jobs.finalization import FinalizationJob
from .jobs.scheduler import ShiftScheduler
from .shifts.calendar import ShiftCalendar
from .shifts.model import ShiftSettings
from .window.policy import TimeWindowPolicy


@dataclass(frozen=True)
class Container:
    settings: ShiftSettings
    clock: Callable[[], datetime]

    attendance_repo: AttendanceRepository
    employees_repo: EmployeeRepository

    calendar: ShiftCalendar
    window_policy: TimeWindowPolicy
    clocking_service: ClockingService
    admin_service: AttendanceAdminService
    seeding_job: AbsenceSeedingJob
    finalization_job: FinalizationJob
    scheduler: ShiftScheduler

    conn: Optional[DatabaseConnection] = None


def assemble_container(
    *,
    attendance_repo: AttendanceRepository,
    employees_repo: EmployeeRepository,
    shift_settings: ShiftSettings,
    clock: Callable[[], datetime] = now_utc,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wires services around already-built repositories."""

    calendar = ShiftCalendar(shift_settings)
    window_policy = TimeWindowPolicy(shift_settings)

    clocking_service = ClockingService(
        attendance_repo,
        employees_repo,
        window_policy,
        calendar,
        strategy_factory=CheckinStrategyFactory(late_grace=shift_settings.late_grace),
        calculator=StandardWorkedTimeCalculator(),
        clock=clock,
    )
    admin_service = AttendanceAdminService(attendance_repo, employees_repo, calendar, clock=clock)
    seeding_job = AbsenceSeedingJob(attendance_repo, employees_repo, calendar, clock=clock)
    finalization_job = FinalizationJob(
        attendance_repo,
        calendar,
        min_work_threshold=shift_settings.min_work_threshold,
        clock=clock,
    )
    scheduler = ShiftScheduler(shift_settings, seeding_job, finalization_job, clock=clock)

    return Container(
        settings=shift_settings,
        clock=clock,
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        calendar=calendar,
        window_policy=window_policy,
        clocking_service=clocking_service,
        admin_service=admin_service,
        seeding_job=seeding_job,
        finalization_job=finalization_job,
        scheduler=scheduler,
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    shift_settings: ShiftSettings,
    clock: Callable[[], datetime] = now_utc,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        attendance_repo=MySQLAttendanceRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        shift_settings=shift_settings,
        clock=clock,
        conn=conn,
    )

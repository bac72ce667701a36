from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role as reported by the external account service."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"


class AttendanceStatus(str, Enum):
    """Attendance status values persisted in the store."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    HALF_DAY = "Half-day"

from __future__ import annotations

from datetime import datetime
from typing import Any


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"
    http_status = 400

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.code, "message": str(self)}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class AlreadyClockedInTodayError(ValidationError):
    code = "ALREADY_CLOCKED_IN_TODAY"

    def __init__(self, message: str = "Already clocked in for this shift"):
        super().__init__(message)


class AlreadyClockedOutTodayError(ValidationError):
    code = "ALREADY_CLOCKED_OUT_TODAY"

    def __init__(self, message: str = "Already clocked out for this shift"):
        super().__init__(message)


class NoActiveSessionError(ValidationError):
    code = "NO_ACTIVE_SESSION"

    def __init__(self, message: str = "No active attendance record found"):
        super().__init__(message)


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    http_status = 404


class EmployeeNotFoundError(NotFoundError):
    code = "EMPLOYEE_NOT_FOUND"

    def __init__(self, message: str = "Employee not found"):
        super().__init__(message)


class RecordNotFoundError(NotFoundError):
    code = "RECORD_NOT_FOUND"

    def __init__(self, message: str = "Attendance record not found"):
        super().__init__(message)


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"
    http_status = 403


class OutsideWindowError(DomainError):
    """Clock actions attempted outside the attendance window.

    Carries the context a client needs to render a countdown.
    """

    code = "ATTENDANCE_TIME_RESTRICTED"
    http_status = 403

    def __init__(
        self,
        message: str,
        *,
        current_time: datetime,
        allowed_window: str,
        next_available_time: datetime,
    ):
        super().__init__(message)
        self.current_time = current_time
        self.allowed_window = allowed_window
        self.next_available_time = next_available_time

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out.update(
            {
                "currentTime": self.current_time.isoformat(),
                "allowedWindow": self.allowed_window,
                "nextAvailableTime": self.next_available_time.isoformat(),
            }
        )
        return out


class JobAlreadyRunningError(DomainError):
    code = "JOB_ALREADY_RUNNING"
    http_status = 409


class StoreUnavailableError(Exception):
    """The attendance store could not be reached (infrastructure, not business)."""

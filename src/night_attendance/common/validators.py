from __future__ import annotations

from typing import Any, Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def require_positive_id(value: Any, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid") from None
    if parsed <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return parsed


def parse_status(value: Optional[str]) -> Optional[AttendanceStatus]:
    if value is None or value == "":
        return None
    try:
        return AttendanceStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"status must be one of: {allowed}") from None

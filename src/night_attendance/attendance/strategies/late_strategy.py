from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import CheckinStrategy, StatusDecision


class LateStrategy(CheckinStrategy):
    """Late clock-in."""

    def decide_checkin(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        late_minutes = int((now - shift_start).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {late_minutes} min")

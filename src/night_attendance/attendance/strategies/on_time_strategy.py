from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import CheckinStrategy, StatusDecision


class OnTimeStrategy(CheckinStrategy):
    """Early or on-time clock-in."""

    def decide_checkin(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

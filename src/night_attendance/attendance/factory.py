from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .strategies.base import CheckinStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class CheckinStrategyFactory:
    """Factory Pattern: choose the clock-in strategy from the shift start and grace.

    Without a grace period every clock-in inside the window counts as present.
    """

    late_grace: Optional[timedelta] = None

    def for_checkin(self, *, now: datetime, shift_start: datetime) -> CheckinStrategy:
        if self.late_grace is None:
            return OnTimeStrategy()

        if now <= shift_start + self.late_grace:
            return OnTimeStrategy()
        return LateStrategy()

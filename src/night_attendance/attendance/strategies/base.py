from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class CheckinStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a clock-in status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        raise NotImplementedError

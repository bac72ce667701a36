from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import format_clock
from ..core.exceptions import OutsideWindowError
from ..shifts.model import ShiftSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowInfo:
    is_within_window: bool
    allowed_window: str
    current_time: datetime
    next_available_time: datetime
    seconds_until_open: int

    def to_dict(self) -> dict:
        return {
            "isWithinWindow": self.is_within_window,
            "allowedWindow": self.allowed_window,
            "currentTime": self.current_time.isoformat(),
            "nextAvailableTime": self.next_available_time.isoformat(),
            "secondsUntilOpen": self.seconds_until_open,
        }


class TimeWindowPolicy:
    """Answers whether an instant falls inside the nightly attendance window.

    Both boundaries are inclusive. The answer depends only on the instant and
    the configured settings, never on a hidden clock.
    """

    def __init__(self, settings: ShiftSettings, *, log: Optional[logging.Logger] = None):
        self._settings = settings
        self._log = log or logger

    @property
    def allowed_window(self) -> str:
        s = self._settings
        return f"{format_clock(s.window_start)} - {format_clock(s.window_end)} {s.tz_label}"

    def is_within_window(self, t: datetime) -> bool:
        tau = self._local(t).time().replace(microsecond=0)
        start, end = self._settings.window_start, self._settings.window_end
        if self._settings.wraps_midnight:
            return tau >= start or tau <= end
        return start <= tau <= end

    def next_window_open(self, t: datetime) -> datetime:
        if self.is_within_window(t):
            return t

        local = self._local(t)
        start = self._settings.window_start
        open_day = local.date() if local.time() < start else local.date() + timedelta(days=1)
        return datetime.combine(open_day, start, tzinfo=self._settings.tz)

    def window_info(self, t: datetime) -> WindowInfo:
        inside = self.is_within_window(t)
        next_open = self.next_window_open(t)
        remaining = 0 if inside else max(int((next_open - t).total_seconds()), 0)
        return WindowInfo(
            is_within_window=inside,
            allowed_window=self.allowed_window,
            current_time=self._local(t),
            next_available_time=self._local(next_open),
            seconds_until_open=remaining,
        )

    def ensure_within_window(self, t: datetime) -> None:
        if self.is_within_window(t):
            return

        if self._settings.bypass_window:
            self._log.warning("Attendance time restriction bypassed in development mode at %s", t.isoformat())
            return

        raise OutsideWindowError(
            f"Clock in/Clock out is only allowed between {self.allowed_window}",
            current_time=self._local(t),
            allowed_window=self.allowed_window,
            next_available_time=self._local(self.next_window_open(t)),
        )

    def _local(self, t: datetime) -> datetime:
        if t.tzinfo is None:
            raise ValueError("TimeWindowPolicy requires timezone-aware datetimes")
        return t.astimezone(self._settings.tz)

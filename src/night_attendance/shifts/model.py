from __future__ import annotations

from dataclasses import dataclass
from datetime import time, timedelta, tzinfo
from typing import Optional


@dataclass(frozen=True)
class ShiftSettings:
    """Domain value: the nightly shift model and its attendance window.

    `window_start > window_end` means the window crosses midnight
    (e.g. 18:00 to 05:30).
    """

    tz: tzinfo
    tz_label: str
    window_start: time
    window_end: time
    finalization_trigger: time
    min_work_threshold: timedelta
    late_grace: Optional[timedelta] = None
    bypass_window: bool = False

    @property
    def wraps_midnight(self) -> bool:
        return self.window_start > self.window_end

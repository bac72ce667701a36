from __future__ import annotations

import os
from types import ModuleType
from zoneinfo import ZoneInfo

from ..common.datetime_utils import parse_duration, parse_time_of_day
from ..core import constants
from ..shifts.model import ShiftSettings


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def shift_env() -> dict:
    """Raw shift configuration shared by every environment."""
    return {
        "ATTENDANCE_TZ": os.getenv("ATTENDANCE_TZ", constants.DEFAULT_TIMEZONE),
        "ATTENDANCE_TZ_LABEL": os.getenv("ATTENDANCE_TZ_LABEL", constants.DEFAULT_TIMEZONE_LABEL),
        "WINDOW_START": os.getenv("WINDOW_START", constants.DEFAULT_WINDOW_START),
        "WINDOW_END": os.getenv("WINDOW_END", constants.DEFAULT_WINDOW_END),
        "FINALIZATION_TRIGGER": os.getenv("FINALIZATION_TRIGGER", constants.DEFAULT_FINALIZATION_TRIGGER),
        "MIN_WORK_THRESHOLD": os.getenv("MIN_WORK_THRESHOLD", constants.DEFAULT_MIN_WORK_THRESHOLD),
        "LATE_GRACE_MINUTES": os.getenv("LATE_GRACE_MINUTES", ""),
    }


def load_shift_settings(settings: ModuleType) -> ShiftSettings:
    """Build the shift model from a settings module.

    The window bypass only takes effect in development.
    """

    raw = dict(getattr(settings, "SHIFT_CONFIG"))
    late_grace_raw = str(raw.get("LATE_GRACE_MINUTES") or "").strip()
    is_dev = getattr(settings, "ENVIRONMENT", "development") == "development"

    return ShiftSettings(
        tz=ZoneInfo(raw["ATTENDANCE_TZ"]),
        tz_label=raw.get("ATTENDANCE_TZ_LABEL") or raw["ATTENDANCE_TZ"],
        window_start=parse_time_of_day(raw["WINDOW_START"]),
        window_end=parse_time_of_day(raw["WINDOW_END"]),
        finalization_trigger=parse_time_of_day(raw["FINALIZATION_TRIGGER"]),
        min_work_threshold=parse_duration(str(raw["MIN_WORK_THRESHOLD"])),
        late_grace=parse_duration(late_grace_raw) if late_grace_raw else None,
        bypass_window=is_dev and bool(getattr(settings, "BYPASS_WINDOW_IN_DEV", False)),
    )

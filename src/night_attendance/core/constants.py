"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Karachi"
DEFAULT_TIMEZONE_LABEL = "PKT"
DEFAULT_WINDOW_START = "18:00"
DEFAULT_WINDOW_END = "05:30"
DEFAULT_FINALIZATION_TRIGGER = "06:30"
DEFAULT_MIN_WORK_THRESHOLD = "30m"

SCHEDULER_MISFIRE_GRACE_SECONDS = 3600

SEEDED_ABSENCE_NOTE = "Auto-marked absent at shift start"
AUTO_CLOCK_OUT_NOTE = "auto-clocked-out at shift end"

SEEDING_JOB_ID = "absence_seeding"
FINALIZATION_JOB_ID = "attendance_finalization"

import os

from .config import shift_env

ENVIRONMENT = "testing"

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "night_attendance_test"),
}

SHIFT_CONFIG = shift_env()

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

BYPASS_WINDOW_IN_DEV = False

SCHEDULER_ENABLED = False

AUTO_INIT_DB = False

import os

from .config import env_flag, shift_env

ENVIRONMENT = "development"

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "night_attendance"),
}

SHIFT_CONFIG = shift_env()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Lets clock-in/out work during the day while developing
BYPASS_WINDOW_IN_DEV = env_flag("BYPASS_WINDOW_IN_DEV")

SCHEDULER_ENABLED = env_flag("SCHEDULER_ENABLED", "1")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")

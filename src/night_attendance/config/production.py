import os

from .config import env_flag, shift_env

ENVIRONMENT = "production"

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "night_attendance"),
}

SHIFT_CONFIG = shift_env()

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

BYPASS_WINDOW_IN_DEV = False

SCHEDULER_ENABLED = env_flag("SCHEDULER_ENABLED", "1")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")

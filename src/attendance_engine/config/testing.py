import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine_test"),
}

CRON_SECRET = "test-cron-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

SCHEDULER_INTERVAL_SECONDS = 60
DEFAULT_TIMEZONE = "UTC"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_reconciler_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

RECONCILE_WORKERS = 1

RECONCILIATION_RULES = {
    "version": "test",
    "regular_daily_cap_hours": 8,
    "overtime_tiers": [
        {"percentage": 25, "limit_hours": 2},
        {"percentage": 50, "limit_hours": 2},
        {"percentage": 100},
    ],
    "night_window": {"start": "19:00", "end": "06:00"},
}

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_reconciler"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

RECONCILE_WORKERS = int(os.getenv("RECONCILE_WORKERS", "1"))

# Example labor rules for local work only. Production must supply its own.
RECONCILIATION_RULES = {
    "version": "dev-2024.1",
    "regular_daily_cap_hours": 8,
    "overtime_tiers": [
        {"percentage": 25, "limit_hours": 2},
        {"percentage": 50, "limit_hours": 2},
        {"percentage": 100},
    ],
    "night_window": {"start": "19:00", "end": "06:00"},
    "dedup_threshold_minutes": 2,
    "gap_threshold_minutes": 5,
    "min_confidence": 85,
    "max_conflict_retries": 3,
    "special_pay_days": {"rest_weekdays": ["SAT", "SUN"], "holidays": ["2025-01-01", "2025-05-01"]},
}

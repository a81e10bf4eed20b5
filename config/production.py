import json
import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_reconciler"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

RECONCILE_WORKERS = int(os.getenv("RECONCILE_WORKERS", "4"))

# No labor defaults here: the rule set is a deployment decision.
# RECONCILIATION_RULES_JSON holds the same mapping as config.development.
_rules_json = os.getenv("RECONCILIATION_RULES_JSON")
RECONCILIATION_RULES = json.loads(_rules_json) if _rules_json else None

"""Constants and defaults.

Note: Only operational defaults live here. Labor-code values (regular cap,
overtime tiers, night window) must come from configuration.
"""

DEFAULT_DEDUP_THRESHOLD_MINUTES = 2
DEFAULT_GAP_THRESHOLD_MINUTES = 5
DEFAULT_MIN_CONFIDENCE = 85
DEFAULT_MAX_CONFLICT_RETRIES = 3
DEFAULT_RECONCILE_WORKERS = 1
DEFAULT_MAX_RANGE_DAYS = 366

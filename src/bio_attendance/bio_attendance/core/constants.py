"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GRACE_MINUTES = 15
DEFAULT_AUDIT_RETENTION_DAYS = 90

# Status thresholds (minutes)
HALF_DAY_THRESHOLD_MINUTES = 15
UNDERTIME_THRESHOLD_MINUTES = 60
OVERTIME_THRESHOLD_MINUTES = 30

UTILITY_MIN_WORKED_HOURS = 8

# Scans this many days away from the declared file date are audited only.
FILE_DATE_TOLERANCE_DAYS = 1

DEFAULT_MERGE_MAX_RETRIES = 3
DEFAULT_NAME_MATCH_PRECEDENCE = ("full_name", "unique_surname", "two_letter", "initial")

"""Settings shared by every environment, overridable through the environment."""

import os

AUDIT_RETENTION_DAYS = int(os.getenv("AUDIT_RETENTION_DAYS", "90"))
DEFAULT_GRACE_MINUTES = int(os.getenv("DEFAULT_GRACE_MINUTES", "15"))
# Comma-separated strategy names, tried in order.
NAME_MATCH_PRECEDENCE = tuple(
    n.strip()
    for n in os.getenv("NAME_MATCH_PRECEDENCE", "full_name,unique_surname,two_letter,initial").split(",")
    if n.strip()
)
FILTER_SCANS_BY_FILE_DATE = bool(int(os.getenv("FILTER_SCANS_BY_FILE_DATE", "1")))
MERGE_MAX_RETRIES = int(os.getenv("MERGE_MAX_RETRIES", "3"))

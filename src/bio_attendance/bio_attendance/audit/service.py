from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_AUDIT_RETENTION_DAYS
from ..core.exceptions import ValidationError
from .model import AuditEntry
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Append-only scan trail with a bounded retention window."""

    def __init__(self, audit: AuditRepository, *, retention_days: int = DEFAULT_AUDIT_RETENTION_DAYS):
        self._audit = audit
        self._retention_days = int(retention_days)

    @property
    def retention_days(self) -> int:
        return self._retention_days

    def record(self, entries: Sequence[AuditEntry]) -> int:
        return self._audit.append_many(list(entries))

    def cleanup(self, *, today: Optional[date] = None, retention_days: Optional[int] = None) -> int:
        days = self._retention_days if retention_days is None else int(retention_days)
        if days < 1:
            raise ValidationError("Retention must be at least one day")

        today = today or now_local().date()
        cutoff = today - timedelta(days=days)
        removed = self._audit.delete_older_than(cutoff)
        logger.info("audit cleanup removed %d scan(s) recorded before %s", removed, cutoff)
        return removed

    def list_for_upload(self, upload_id: int) -> Sequence[AuditEntry]:
        return self._audit.list_for_upload(upload_id)

    def list_between(self, start: date, end: date) -> Sequence[AuditEntry]:
        return self._audit.list_between(start, end)

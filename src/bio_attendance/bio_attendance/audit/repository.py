from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import AuditEntry


class AuditRepository(Protocol):
    def append_many(self, entries: Sequence[AuditEntry]) -> int:
        raise NotImplementedError

    def delete_older_than(self, cutoff: date) -> int:
        """Delete entries whose record_date is before cutoff. Returns rows removed."""

        raise NotImplementedError

    def list_for_upload(self, upload_id: int) -> Sequence[AuditEntry]:
        raise NotImplementedError

    def list_between(self, start: date, end: date) -> Sequence[AuditEntry]:
        """Entries scanned on start..end inclusive, oldest first."""

        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..ingestion.model import RawScan


@dataclass(frozen=True)
class AuditEntry:
    """A raw scan as kept in the retention store, whatever its matching outcome."""

    scan: RawScan
    upload_id: Optional[int] = None
    site_id: Optional[int] = None
    employee_id: Optional[int] = None
    scan_id: Optional[int] = None

    @property
    def record_date(self) -> date:
        return self.scan.timestamp.date()

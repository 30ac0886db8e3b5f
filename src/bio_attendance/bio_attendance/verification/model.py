from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from ..attendance.model import AttendanceRecord
from ..core.enums import ReviewReason, ScanMode


@dataclass(frozen=True)
class UnresolvedScan:
    """A scan that could not be reconciled automatically (name or window problem)."""

    raw_name: str
    mode: ScanMode
    scanned_at: datetime
    reason: ReviewReason
    candidate_ids: Tuple[int, ...] = ()
    device_id: Optional[str] = None
    site_id: Optional[int] = None
    upload_id: Optional[int] = None
    employee_id: Optional[int] = None
    resolved: bool = False
    unresolved_id: Optional[int] = None


@dataclass(frozen=True)
class VerificationQueue:
    records: List[AttendanceRecord] = field(default_factory=list)
    unresolved: List[UnresolvedScan] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.records) + len(self.unresolved)

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

from ..core.enums import ScanMode


@dataclass(frozen=True)
class RawScan:
    """One punch row from a device export. Never modified after parsing."""

    device_id: str
    raw_name: str
    mode: ScanMode
    timestamp: datetime
    user_id: Optional[str] = None
    line_no: Optional[int] = None


@dataclass(frozen=True)
class ParsedFile:
    scans: List[RawScan] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class IngestionSummary:
    upload_id: Optional[int]
    file_date: date
    site_id: Optional[int] = None
    total_scans: int = 0
    matched: int = 0
    unmatched: int = 0
    ambiguous: int = 0
    flagged: int = 0
    duplicates: int = 0
    outside_range: int = 0
    non_work_day: int = 0
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "upload_id": self.upload_id,
            "file_date": self.file_date.isoformat(),
            "site_id": self.site_id,
            "total_scans": self.total_scans,
            "matched": self.matched,
            "unmatched": self.unmatched,
            "ambiguous": self.ambiguous,
            "flagged": self.flagged,
            "duplicates": self.duplicates,
            "outside_range": self.outside_range,
            "non_work_day": self.non_work_day,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class Upload:
    upload_id: int
    file_name: Optional[str]
    file_date: date
    site_id: Optional[int] = None
    total_scans: int = 0
    matched: int = 0
    unmatched: int = 0
    flagged: int = 0
    warnings: int = 0
    created_at: Optional[datetime] = None


@dataclass
class ReprocessSummary:
    """Result of replaying stored scans for a date range (a preview when dry_run)."""

    start: date
    end: date
    dry_run: bool
    total_scans: int = 0
    employees: Dict[int, int] = field(default_factory=dict)
    unresolved: int = 0
    applied: Optional[IngestionSummary] = None

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "dry_run": self.dry_run,
            "total_scans": self.total_scans,
            "employees": {str(k): v for k, v in sorted(self.employees.items())},
            "unresolved": self.unresolved,
            "applied": self.applied.to_dict() if self.applied else None,
        }

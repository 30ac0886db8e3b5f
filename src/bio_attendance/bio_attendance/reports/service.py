from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..attendance.repository import AttendanceRepository
from ..core.enums import FLAGGED_STATUSES, AttendanceStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class StatusStatistics:
    start: date
    end: date
    counts: dict[str, int]
    total: int
    flagged: int

    def to_dict(self) -> dict:
        return {
            "start": self.start.strftime("%Y-%m-%d"),
            "end": self.end.strftime("%Y-%m-%d"),
            "counts": dict(self.counts),
            "total": self.total,
            "flagged": self.flagged,
        }


class StatisticsService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def status_counts(self, *, start: date, end: date) -> StatusStatistics:
        if end < start:
            raise ValidationError("End date must be on or after start date")

        found = self._attendance.count_by_status(start=start, end=end)

        # Every status is reported, zero when absent, in declaration order.
        counts = {status.value: int(found.get(status, 0)) for status in AttendanceStatus}
        flagged = sum(n for status, n in found.items() if status in FLAGGED_STATUSES)
        return StatusStatistics(start=start, end=end, counts=counts, total=sum(counts.values()), flagged=flagged)

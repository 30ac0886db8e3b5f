from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from ..core.enums import FLAGGED_STATUSES, AttendanceStatus, Slot


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): one employee's attendance for one shift-date."""

    employee_id: int
    shift_date: date
    attendance_id: Optional[int] = None
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    site_in: Optional[int] = None
    site_out: Optional[int] = None
    status: AttendanceStatus = AttendanceStatus.NCNS
    secondary_status: Optional[AttendanceStatus] = None
    tardy_minutes: Optional[int] = None
    undertime_minutes: Optional[int] = None
    overtime_minutes: Optional[int] = None
    verified: bool = False
    notes: Optional[str] = None

    def slot_value(self, slot: Slot) -> Optional[datetime]:
        return self.time_in if slot == Slot.TIME_IN else self.time_out

    @property
    def has_open_time_in(self) -> bool:
        return self.time_in is not None and self.time_out is None

    @property
    def cross_site(self) -> bool:
        return self.site_in is not None and self.site_out is not None and self.site_in != self.site_out

    @property
    def needs_review(self) -> bool:
        if self.verified:
            return False
        return (
            self.status in FLAGGED_STATUSES
            or self.secondary_status in FLAGGED_STATUSES
            or self.cross_site
        )

    def note_lines(self) -> List[str]:
        return [line for line in (self.notes or "").splitlines() if line.strip()]


@dataclass(frozen=True)
class StatusCount:
    status: AttendanceStatus
    count: int

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Iterable, Optional, Protocol, Sequence, Set

from ..core.enums import AttendanceStatus, Slot
from .model import AttendanceRecord
from .strategies.base import StatusDecision


class AttendanceRepository(Protocol):
    """Storage for AttendanceRecord, unique per (employee_id, shift_date)."""

    def get(self, employee_id: int, shift_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_or_create(self, employee_id: int, shift_date: date) -> AttendanceRecord:
        """Atomic upsert on the unique key; never creates a second row."""

        raise NotImplementedError

    def fill_slot(self, attendance_id: int, slot: Slot, timestamp: datetime, site_id: Optional[int]) -> bool:
        """Set the slot only while it is still empty.

        Returns False when another writer filled it first.
        """

        raise NotImplementedError

    def update_notes(self, attendance_id: int, notes: Optional[str]) -> None:
        raise NotImplementedError

    def update_status(self, attendance_id: int, decision: StatusDecision) -> None:
        raise NotImplementedError

    def update_manual(
        self,
        attendance_id: int,
        *,
        time_in: Optional[datetime],
        time_out: Optional[datetime],
        status: AttendanceStatus,
        notes: Optional[str],
        verified: bool,
    ) -> bool:
        """Reviewer override used by the verification queue."""

        raise NotImplementedError

    def mark_advised(self, attendance_ids: Iterable[int]) -> int:
        raise NotImplementedError

    def delete_many(self, attendance_ids: Iterable[int]) -> int:
        raise NotImplementedError

    def list_review(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[AttendanceRecord]:
        """Unverified records with a flagged status/secondary status or cross-site punches."""

        raise NotImplementedError

    def employee_ids_for_date(self, shift_date: date) -> Set[int]:
        raise NotImplementedError

    def create_absence(self, employee_id: int, shift_date: date) -> bool:
        raise NotImplementedError

    def count_by_status(self, *, start: date, end: date) -> Dict[AttendanceStatus, int]:
        raise NotImplementedError

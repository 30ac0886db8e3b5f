from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple

from ..attendance.model import AttendanceRecord
from ..core.enums import ScanMode, ShiftFamily, Slot
from ..schedules.model import ShiftAssignment
from .model import Classification
from .patterns import window_for

logger = logging.getLogger(__name__)

# (employee_id, shift_date) -> stored record, or None when there is none yet.
RecordLookup = Callable[[int, date], Optional[AttendanceRecord]]


def _no_record(employee_id: int, shift_date: date) -> Optional[AttendanceRecord]:
    return None


class ShiftWindowClassifier:
    """Turn a scan timestamp into (shift-date, slot) for an employee's assignment.

    A scan whose hour falls in both ranges closes the shift-date it would
    close when that record already holds an open time-in, otherwise it opens
    a new one. A scan already stored in one of its candidate slots maps back
    to that slot, so replaying a file is a no-op. Scans outside both ranges
    yield None.
    """

    def __init__(self, record_for: Optional[RecordLookup] = None):
        self._record_for = record_for or _no_record

    def _is_open(self, employee_id: int, shift_date: date) -> bool:
        record = self._record_for(employee_id, shift_date)
        return bool(record and record.has_open_time_in)

    def _stored_slot(self, employee_id: int, found, timestamp: datetime) -> Optional[Tuple[Slot, date]]:
        for slot, shift_date in found:
            record = self._record_for(employee_id, shift_date)
            if record is not None and record.slot_value(slot) == timestamp:
                return slot, shift_date
        return None

    def candidates(
        self, assignment: ShiftAssignment, timestamp: datetime, mode: ScanMode = ScanMode.UNSPECIFIED
    ) -> List[Tuple[Slot, date]]:
        window = window_for(assignment)
        punch_date = timestamp.date()
        slots = [Slot.TIME_IN, Slot.TIME_OUT]
        if mode == ScanMode.IN:
            slots = [Slot.TIME_IN]
        elif mode == ScanMode.OUT:
            slots = [Slot.TIME_OUT]

        found: List[Tuple[Slot, date]] = []
        for slot in slots:
            for offset in window.range_for(slot).day_offsets(timestamp.hour):
                found.append((slot, punch_date + timedelta(days=offset)))
        return found

    def in_window(self, assignment: ShiftAssignment, timestamp: datetime) -> bool:
        return bool(self.candidates(assignment, timestamp))

    def classify(
        self,
        assignment: ShiftAssignment,
        timestamp: datetime,
        mode: ScanMode = ScanMode.UNSPECIFIED,
    ) -> Optional[Classification]:
        window = window_for(assignment)
        found = self.candidates(assignment, timestamp, mode)
        if not found:
            logger.debug(
                "scan %s for employee %s outside %s", timestamp, assignment.employee_id, window.name
            )
            return None

        employee_id = assignment.employee_id
        outs = [d for slot, d in found if slot == Slot.TIME_OUT]
        ins = [d for slot, d in found if slot == Slot.TIME_IN]

        slot, shift_date = None, None
        stored = self._stored_slot(employee_id, found, timestamp)
        if stored is not None:
            slot, shift_date = stored
        else:
            for candidate in outs:
                if not ins or self._is_open(employee_id, candidate):
                    slot, shift_date = Slot.TIME_OUT, candidate
                    break
        if slot is None:
            slot, shift_date = Slot.TIME_IN, ins[0]
            if window.family == ShiftFamily.GRAVEYARD:
                shift_date = self._graveyard_time_in_date(assignment, timestamp, shift_date)

        return Classification(
            employee_id=employee_id,
            shift_date=shift_date,
            slot=slot,
            timestamp=timestamp,
            window=window,
            non_work_day=bool(assignment.work_days) and not assignment.works_on(shift_date),
        )

    def _graveyard_time_in_date(
        self, assignment: ShiftAssignment, timestamp: datetime, shift_date: date
    ) -> date:
        # Post-midnight time-in: belongs to the previous evening only when that
        # evening is already open or is a scheduled work day.
        punch_date = timestamp.date()
        if shift_date == punch_date:
            return shift_date
        if self._is_open(assignment.employee_id, shift_date):
            return shift_date
        if not assignment.work_days or assignment.works_on(shift_date):
            return shift_date
        return punch_date


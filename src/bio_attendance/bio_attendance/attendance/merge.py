"""Slot merge for attendance records.

fill-if-empty, keep-existing-on-conflict: a slot that already holds a time is
never overwritten by a later scan; the later scan is remembered as a note.
Applying the same scan twice is a no-op, so reprocessing a file changes nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.enums import Slot
from .model import AttendanceRecord


@dataclass(frozen=True)
class MergeOutcome:
    record: AttendanceRecord
    filled: bool = False
    duplicate: bool = False

    @property
    def changed(self) -> bool:
        return self.filled or self.duplicate


def duplicate_note(slot: Slot, timestamp: datetime) -> str:
    return f"duplicate {slot.value} scan {timestamp:%Y-%m-%d %H:%M:%S} ignored"


def append_note(notes: Optional[str], line: str) -> str:
    lines = [l for l in (notes or "").splitlines() if l.strip()]
    if line in lines:
        return "\n".join(lines)
    lines.append(line)
    return "\n".join(lines)


def merge_slot(
    record: AttendanceRecord, slot: Slot, timestamp: datetime, site_id: Optional[int] = None
) -> MergeOutcome:
    current = record.slot_value(slot)

    if current is None:
        if slot == Slot.TIME_IN:
            merged = replace(record, time_in=timestamp, site_in=site_id)
        else:
            merged = replace(record, time_out=timestamp, site_out=site_id)
        return MergeOutcome(record=merged, filled=True)

    if current == timestamp:
        return MergeOutcome(record=record)

    note = duplicate_note(slot, timestamp)
    if note in record.note_lines():
        return MergeOutcome(record=record)
    return MergeOutcome(record=replace(record, notes=append_note(record.notes, note)), duplicate=True)

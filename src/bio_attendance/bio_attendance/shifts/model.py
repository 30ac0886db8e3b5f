from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Tuple

from ..core.enums import ShiftFamily, Slot


@dataclass(frozen=True)
class HourRange:
    """Inclusive hour-of-day range measured from midnight of the shift-date.

    Values above 24 continue into the next calendar day (25 is 01:00 next day);
    negative values reach back into the previous evening.
    """

    min: int
    max: int

    def __post_init__(self) -> None:
        if self.max < self.min:
            raise ValueError(f"HourRange max {self.max} < min {self.min}")
        if self.max - self.min >= 24:
            raise ValueError("HourRange must span less than a full day")

    def contains(self, hour: int) -> bool:
        return bool(self.day_offsets(hour))

    def day_offsets(self, hour: int) -> Tuple[int, ...]:
        """Offsets to add to the punch date to get the shift-date, one per match."""
        offsets = []
        for offset in (0, -1, 1):
            if self.min <= hour - 24 * offset <= self.max:
                offsets.append(offset)
        return tuple(offsets)


@dataclass(frozen=True)
class ShiftWindow:
    """Accepted time-in and time-out hours for one named shift pattern."""

    name: str
    family: ShiftFamily
    start_hour: int
    time_in: HourRange
    time_out: HourRange

    def range_for(self, slot: Slot) -> HourRange:
        return self.time_in if slot == Slot.TIME_IN else self.time_out


@dataclass(frozen=True)
class Classification:
    employee_id: int
    shift_date: date
    slot: Slot
    timestamp: datetime
    window: ShiftWindow
    non_work_day: bool = False


@dataclass(frozen=True)
class ScheduledBounds:
    time_in: datetime
    time_out: datetime

    @property
    def length(self) -> timedelta:
        return self.time_out - self.time_in

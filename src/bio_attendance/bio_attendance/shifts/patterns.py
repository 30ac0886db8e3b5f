"""Shift window pattern table.

48 patterns keyed by (family, scheduled start hour):

- graveyard  start 00-04, ends later the same clock day. The shift-date is the
  evening before the scheduled start, so an early arrival at 22:30 and the
  09:00 time-out both belong to that evening's date.
- same_day   start 05-23, time-out on the shift-date (overtime may run to 02:59).
- next_day   start 00-23, time-out on the following day.

Ranges are hours relative to midnight of the shift-date (see HourRange).
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Dict, Tuple

from ..core.enums import ShiftFamily, ShiftType
from ..schedules.model import ShiftAssignment
from .model import HourRange, ScheduledBounds, ShiftWindow

GRAVEYARD_START_HOURS = range(0, 5)

# (time_in lead/lag, time_out from/to) per family, relative to the start hour.
_GRAVEYARD_IN = (20, 26)  # absolute evening start, lag past the 24h mark
_GRAVEYARD_OUT = (27, 38)
_SAME_DAY_IN = (-2, 4)
_SAME_DAY_OUT_END = 26
_NEXT_DAY_IN = (-2, 4)
_NEXT_DAY_OUT = (1, 14)
# 24h utility shifts end around the next day's start hour.
_UTILITY_OUT = (20, 30)


def _graveyard(start: int) -> ShiftWindow:
    return ShiftWindow(
        name=f"graveyard_{start:02d}00",
        family=ShiftFamily.GRAVEYARD,
        start_hour=start,
        time_in=HourRange(_GRAVEYARD_IN[0], _GRAVEYARD_IN[1] + start),
        time_out=HourRange(_GRAVEYARD_OUT[0] + start, _GRAVEYARD_OUT[1] + start),
    )


def _same_day(start: int) -> ShiftWindow:
    return ShiftWindow(
        name=f"same_day_{start:02d}00",
        family=ShiftFamily.SAME_DAY,
        start_hour=start,
        time_in=HourRange(start + _SAME_DAY_IN[0], start + _SAME_DAY_IN[1]),
        time_out=HourRange(min(start + 1, 23), _SAME_DAY_OUT_END),
    )


def _next_day(start: int) -> ShiftWindow:
    return ShiftWindow(
        name=f"next_day_{start:02d}00",
        family=ShiftFamily.NEXT_DAY,
        start_hour=start,
        time_in=HourRange(start + _NEXT_DAY_IN[0], start + _NEXT_DAY_IN[1]),
        time_out=HourRange(start + _NEXT_DAY_OUT[0], start + _NEXT_DAY_OUT[1]),
    )


SHIFT_PATTERNS: Dict[Tuple[ShiftFamily, int], ShiftWindow] = {
    **{(ShiftFamily.GRAVEYARD, h): _graveyard(h) for h in GRAVEYARD_START_HOURS},
    **{(ShiftFamily.SAME_DAY, h): _same_day(h) for h in range(5, 24)},
    **{(ShiftFamily.NEXT_DAY, h): _next_day(h) for h in range(0, 24)},
}


def family_of(scheduled_time_in: time, scheduled_time_out: time) -> ShiftFamily:
    if scheduled_time_in.hour in GRAVEYARD_START_HOURS and scheduled_time_out > scheduled_time_in:
        return ShiftFamily.GRAVEYARD
    if scheduled_time_out <= scheduled_time_in:
        return ShiftFamily.NEXT_DAY
    return ShiftFamily.SAME_DAY


def window_for(assignment: ShiftAssignment) -> ShiftWindow:
    family = family_of(assignment.scheduled_time_in, assignment.scheduled_time_out)
    window = SHIFT_PATTERNS[(family, assignment.scheduled_time_in.hour)]
    if assignment.shift_type == ShiftType.UTILITY_24H and family == ShiftFamily.NEXT_DAY:
        start = window.start_hour
        window = replace(
            window,
            name=f"utility_24h_{start:02d}00",
            time_out=HourRange(start + _UTILITY_OUT[0], start + _UTILITY_OUT[1]),
        )
    return window


def scheduled_bounds(assignment: ShiftAssignment, shift_date: date) -> ScheduledBounds:
    """Scheduled time-in/out as datetimes for the given shift-date."""
    family = family_of(assignment.scheduled_time_in, assignment.scheduled_time_out)
    in_offset = 1 if family == ShiftFamily.GRAVEYARD else 0
    out_offset = 0 if family == ShiftFamily.SAME_DAY else 1

    time_in = datetime.combine(shift_date + timedelta(days=in_offset), assignment.scheduled_time_in)
    time_out = datetime.combine(shift_date + timedelta(days=out_offset), assignment.scheduled_time_out)
    return ScheduledBounds(time_in=time_in, time_out=time_out)

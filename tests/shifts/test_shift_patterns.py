from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.bio_attendance.bio_attendance.core.enums import ShiftFamily, ShiftType
from src.bio_attendance.bio_attendance.shifts.model import HourRange
from src.bio_attendance.bio_attendance.shifts.patterns import SHIFT_PATTERNS, family_of, scheduled_bounds, window_for
from tests.fakes import make_assignment


def test_pattern_table_has_48_entries():
    families = [family for family, _ in SHIFT_PATTERNS]

    assert len(SHIFT_PATTERNS) == 48
    assert families.count(ShiftFamily.GRAVEYARD) == 5
    assert families.count(ShiftFamily.SAME_DAY) == 19
    assert families.count(ShiftFamily.NEXT_DAY) == 24
    assert len({w.name for w in SHIFT_PATTERNS.values()}) == 48


def test_plain_range_membership():
    r = HourRange(7, 16)

    assert r.contains(7) and r.contains(16)
    assert not r.contains(6) and not r.contains(17)


def test_wrapping_range_membership():
    r = HourRange(22, 26)

    assert r.contains(22) and r.contains(23)
    assert r.contains(0) and r.contains(2)
    assert not r.contains(3) and not r.contains(21)
    assert r.day_offsets(1) == (-1,)
    assert r.day_offsets(23) == (0,)


def test_range_must_be_shorter_than_a_day():
    with pytest.raises(ValueError):
        HourRange(0, 24)
    with pytest.raises(ValueError):
        HourRange(10, 9)


@pytest.mark.parametrize(
    "start,end,family",
    [
        (time(0, 0), time(9, 0), ShiftFamily.GRAVEYARD),
        (time(4, 0), time(13, 0), ShiftFamily.GRAVEYARD),
        (time(5, 0), time(14, 0), ShiftFamily.SAME_DAY),
        (time(7, 0), time(16, 0), ShiftFamily.SAME_DAY),
        (time(22, 0), time(7, 0), ShiftFamily.NEXT_DAY),
        (time(15, 0), time(0, 0), ShiftFamily.NEXT_DAY),
        (time(7, 0), time(7, 0), ShiftFamily.NEXT_DAY),
    ],
)
def test_family_of(start, end, family):
    assert family_of(start, end) == family


def test_graveyard_bounds_fall_on_next_calendar_day():
    bounds = scheduled_bounds(make_assignment(1, time(0, 0), time(9, 0)), date(2024, 3, 4))

    assert bounds.time_in == datetime(2024, 3, 5, 0, 0)
    assert bounds.time_out == datetime(2024, 3, 5, 9, 0)


def test_next_day_bounds():
    bounds = scheduled_bounds(make_assignment(1, time(22, 0), time(7, 0)), date(2024, 3, 4))

    assert bounds.time_in == datetime(2024, 3, 4, 22, 0)
    assert bounds.time_out == datetime(2024, 3, 5, 7, 0)
    assert bounds.length.total_seconds() == 9 * 3600


def test_utility_window_ends_around_next_start():
    window = window_for(make_assignment(1, time(7, 0), time(7, 0), shift_type=ShiftType.UTILITY_24H))

    assert window.name == "utility_24h_0700"
    assert window.time_out.day_offsets(7) == (-1,)

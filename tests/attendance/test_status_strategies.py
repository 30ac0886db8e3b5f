from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.bio_attendance.bio_attendance.attendance.factory import StatusStrategyFactory
from src.bio_attendance.bio_attendance.attendance.model import AttendanceRecord
from src.bio_attendance.bio_attendance.attendance.strategies.standard_strategy import StandardStatusStrategy
from src.bio_attendance.bio_attendance.attendance.strategies.utility_strategy import UtilityStatusStrategy
from src.bio_attendance.bio_attendance.core.enums import AttendanceStatus, ShiftType
from src.bio_attendance.bio_attendance.shifts.patterns import scheduled_bounds
from tests.fakes import make_assignment

DAY = date(2024, 3, 4)
OFFICE = make_assignment(1, time(8, 0), time(17, 0), grace=15)
UTILITY = make_assignment(2, time(7, 0), time(7, 0), shift_type=ShiftType.UTILITY_24H)


def _decide(time_in=None, time_out=None, *, assignment=OFFICE, as_of=None):
    record = AttendanceRecord(assignment.employee_id, DAY, time_in=time_in, time_out=time_out)
    strategy = StatusStrategyFactory().for_assignment(assignment)
    return strategy.decide(
        record=record,
        bounds=scheduled_bounds(assignment, DAY),
        grace_minutes=assignment.grace_period_minutes,
        as_of=as_of,
    )


def at(h, m, s=0, day=4):
    return datetime(2024, 3, day, h, m, s)


def test_factory_picks_strategy_by_shift_type():
    assert isinstance(StatusStrategyFactory().for_assignment(OFFICE), StandardStatusStrategy)
    assert isinstance(StatusStrategyFactory().for_assignment(UTILITY), UtilityStatusStrategy)


@pytest.mark.parametrize(
    "arrival,status,tardy",
    [
        (at(7, 50), AttendanceStatus.ON_TIME, None),
        (at(8, 15, 59), AttendanceStatus.ON_TIME, None),
        (at(8, 16), AttendanceStatus.TARDY, 1),
        (at(8, 30, 59), AttendanceStatus.TARDY, 15),
        (at(8, 31), AttendanceStatus.HALF_DAY, 16),
    ],
)
def test_lateness_thresholds(arrival, status, tardy):
    decision = _decide(arrival, at(17, 0))

    assert decision.status == status
    assert decision.tardy_minutes == tardy


def test_early_departure_of_an_hour_is_undertime():
    assert _decide(at(8, 0), at(16, 1)).status == AttendanceStatus.ON_TIME

    decision = _decide(at(8, 0), at(16, 0))
    assert decision.status == AttendanceStatus.UNDERTIME
    assert decision.undertime_minutes == 60


def test_undertime_rides_along_with_tardy():
    decision = _decide(at(8, 20), at(15, 0))

    assert decision.status == AttendanceStatus.TARDY
    assert decision.secondary_status == AttendanceStatus.UNDERTIME


def test_overtime_recorded_past_threshold():
    assert _decide(at(8, 0), at(17, 30)).overtime_minutes is None
    assert _decide(at(8, 0), at(17, 31)).overtime_minutes == 31


def test_missing_punches():
    assert _decide().status == AttendanceStatus.NCNS
    assert _decide(time_out=at(17, 0)).status == AttendanceStatus.FAILED_BIO_IN
    assert _decide(time_in=at(8, 0)).status == AttendanceStatus.FAILED_BIO_OUT


def test_lone_time_in_is_provisional_before_scheduled_out():
    pending = _decide(time_in=at(8, 0), as_of=at(12, 0))
    elapsed = _decide(time_in=at(8, 0), as_of=at(18, 0))

    assert pending.status == AttendanceStatus.ON_TIME
    assert elapsed.status == AttendanceStatus.FAILED_BIO_OUT


def test_late_lone_time_in_keeps_lateness_as_primary():
    decision = _decide(time_in=at(9, 0))

    assert decision.status == AttendanceStatus.HALF_DAY
    assert decision.secondary_status == AttendanceStatus.FAILED_BIO_OUT


def test_utility_shift_uses_hours_worked():
    full = _decide(at(7, 30), at(15, 30), assignment=UTILITY)
    short = _decide(at(7, 30), at(14, 30), assignment=UTILITY)

    assert full.status == AttendanceStatus.ON_TIME
    assert short.status == AttendanceStatus.UNDERTIME
    assert short.undertime_minutes == 60
    assert _decide(time_in=at(7, 0), assignment=UTILITY).status == AttendanceStatus.FAILED_BIO_OUT

from __future__ import annotations

from datetime import date, time

import pytest

from src.bio_attendance.bio_attendance.core.enums import ShiftType
from src.bio_attendance.bio_attendance.core.exceptions import ValidationError
from src.bio_attendance.bio_attendance.schedules.service import ScheduleService
from tests.fakes import InMemorySchedules


def _assign(svc, **overrides):
    args = dict(
        employee_id=1,
        shift_type=ShiftType.NIGHT,
        scheduled_time_in=time(22, 0),
        scheduled_time_out=time(7, 0),
        work_days=["Monday", " tuesday "],
        effective_date=date(2024, 3, 1),
    )
    args.update(overrides)
    return svc.assign(**args)


def test_new_assignment_replaces_active_one():
    repo = InMemorySchedules()
    svc = ScheduleService(repo, default_grace_minutes=10)

    _assign(svc)
    _assign(svc, shift_type=ShiftType.MORNING, scheduled_time_in=time(8, 0), scheduled_time_out=time(17, 0))

    active = repo.get_active_for_employee(1)
    assert active.shift_type == ShiftType.MORNING
    assert active.grace_period_minutes == 10
    assert active.work_days == frozenset({"monday", "tuesday"})
    assert len(repo.list_active()) == 1


def test_utility_shift_may_start_and_end_at_same_time():
    svc = ScheduleService(InMemorySchedules())

    assert _assign(svc, shift_type=ShiftType.UTILITY_24H, scheduled_time_in=time(7, 0), scheduled_time_out=time(7, 0))
    with pytest.raises(ValidationError):
        _assign(svc, scheduled_time_in=time(7, 0), scheduled_time_out=time(7, 0))


@pytest.mark.parametrize(
    "overrides",
    [
        {"work_days": ["funday"]},
        {"work_days": []},
        {"grace_period_minutes": -1},
        {"end_date": date(2024, 2, 1)},
        {"employee_id": 0},
    ],
)
def test_invalid_assignments(overrides):
    with pytest.raises(ValidationError):
        _assign(ScheduleService(InMemorySchedules()), **overrides)

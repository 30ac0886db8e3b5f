from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.bio_attendance.bio_attendance.attendance.model import AttendanceRecord
from src.bio_attendance.bio_attendance.attendance.service import NON_WORK_DAY_NOTE, ReconciliationService
from src.bio_attendance.bio_attendance.core.enums import AttendanceStatus, Slot
from src.bio_attendance.bio_attendance.core.exceptions import MergeConflictError
from src.bio_attendance.bio_attendance.employees.model import Employee
from src.bio_attendance.bio_attendance.shifts.model import Classification
from src.bio_attendance.bio_attendance.shifts.patterns import window_for
from tests.fakes import InMemoryAttendance, InMemoryEmployees, InMemorySchedules, make_assignment

DAY = date(2024, 3, 4)
OFFICE = make_assignment(1, time(8, 0), time(17, 0))


def _classified(slot, stamp, *, employee_id=1, shift_date=DAY, non_work_day=False):
    return Classification(
        employee_id=employee_id,
        shift_date=shift_date,
        slot=slot,
        timestamp=stamp,
        window=window_for(OFFICE),
        non_work_day=non_work_day,
    )


def _service(attendance=None, assignments=(OFFICE,), employees=()):
    return ReconciliationService(
        attendance or InMemoryAttendance(),
        InMemorySchedules(assignments),
        InMemoryEmployees(employees),
        max_retries=3,
    )


def test_status_is_recomputed_on_each_merge():
    repo = InMemoryAttendance()
    svc = _service(repo)

    first = svc.merge(_classified(Slot.TIME_IN, datetime(2024, 3, 4, 8, 20)), OFFICE, site_id=1)
    assert first.record.status == AttendanceStatus.TARDY
    assert first.record.secondary_status == AttendanceStatus.FAILED_BIO_OUT

    second = svc.merge(_classified(Slot.TIME_OUT, datetime(2024, 3, 4, 17, 5)), OFFICE, site_id=1)
    stored = repo.get(1, DAY)
    assert stored.status == AttendanceStatus.TARDY
    assert stored.secondary_status is None
    assert stored == second.record


def test_duplicate_scan_never_overwrites():
    repo = InMemoryAttendance()
    svc = _service(repo)

    svc.merge(_classified(Slot.TIME_IN, datetime(2024, 3, 4, 7, 55)), OFFICE)
    result = svc.merge(_classified(Slot.TIME_IN, datetime(2024, 3, 4, 7, 58)), OFFICE)

    assert result.duplicate
    assert repo.get(1, DAY).time_in == datetime(2024, 3, 4, 7, 55)
    assert "duplicate time_in scan 2024-03-04 07:58:00 ignored" in repo.get(1, DAY).note_lines()


def test_non_work_day_note_added_once():
    repo = InMemoryAttendance()
    svc = _service(repo)

    svc.merge(_classified(Slot.TIME_IN, datetime(2024, 3, 4, 8, 0), non_work_day=True), OFFICE)
    svc.merge(_classified(Slot.TIME_OUT, datetime(2024, 3, 4, 17, 0), non_work_day=True), OFFICE)

    assert repo.get(1, DAY).note_lines() == [NON_WORK_DAY_NOTE]


class RacingAttendance(InMemoryAttendance):
    """Another writer fills the slot right before our conditional update."""

    def __init__(self, races: int):
        super().__init__()
        self.races = races

    def fill_slot(self, attendance_id, slot, timestamp, site_id):
        if self.races > 0:
            self.races -= 1
            super().fill_slot(attendance_id, slot, datetime(2024, 3, 4, 7, 50), 9)
        return super().fill_slot(attendance_id, slot, timestamp, site_id)


def test_lost_race_is_re_merged_not_overwritten():
    repo = RacingAttendance(races=1)
    result = _service(repo).merge(_classified(Slot.TIME_IN, datetime(2024, 3, 4, 7, 58)), OFFICE, site_id=1)

    assert result.duplicate
    assert repo.get(1, DAY).time_in == datetime(2024, 3, 4, 7, 50)
    assert repo.get(1, DAY).site_in == 9


class AlwaysLosing(InMemoryAttendance):
    def fill_slot(self, attendance_id, slot, timestamp, site_id):
        return False


def test_conflicts_exhausting_retries_raise():
    with pytest.raises(MergeConflictError):
        _service(AlwaysLosing()).merge(_classified(Slot.TIME_IN, datetime(2024, 3, 4, 7, 58)), OFFICE)


def test_advised_absence_survives_recompute():
    repo = InMemoryAttendance()
    record = repo.get_or_create(1, DAY)
    repo.mark_advised([record.attendance_id])

    recomputed = _service(repo).recompute_for(repo.get(1, DAY))

    assert recomputed.status == AttendanceStatus.ADVISED_ABSENCE


def test_mark_absences_creates_ncns_for_scheduled_employees_only():
    repo = InMemoryAttendance()
    weekday_only = make_assignment(2, time(8, 0), time(17, 0), work_days={"tuesday"})
    inactive = make_assignment(3, time(8, 0), time(17, 0))
    svc = _service(
        repo,
        assignments=(OFFICE, weekday_only, inactive),
        employees=(Employee(1, "Anna", "Cruz"), Employee(2, "Ben", "Cruz"), Employee(3, "Cy", "Cruz", is_active=False)),
    )

    # 2024-03-04 is a Monday.
    assert svc.mark_absences(DAY) == 1
    assert repo.get(1, DAY).status == AttendanceStatus.NCNS
    assert repo.get(2, DAY) is None
    assert repo.get(3, DAY) is None
    assert svc.mark_absences(DAY) == 0


def test_record_flags():
    record = AttendanceRecord(1, DAY, status=AttendanceStatus.ON_TIME, site_in=1, site_out=1)

    assert not record.needs_review
    assert AttendanceRecord(1, DAY, status=AttendanceStatus.HALF_DAY).needs_review
    assert not AttendanceRecord(1, DAY, status=AttendanceStatus.HALF_DAY, verified=True).needs_review

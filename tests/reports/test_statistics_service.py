from __future__ import annotations

from datetime import date

import pytest

from src.bio_attendance.bio_attendance.core.exceptions import ValidationError
from src.bio_attendance.bio_attendance.reports.service import StatisticsService
from tests.fakes import InMemoryAttendance


def test_counts_cover_every_status():
    repo = InMemoryAttendance()
    repo.get_or_create(1, date(2024, 3, 4))
    repo.get_or_create(2, date(2024, 3, 4))
    record = repo.get_or_create(3, date(2024, 3, 5))
    repo.mark_advised([record.attendance_id])
    repo.get_or_create(4, date(2024, 4, 1))

    stats = StatisticsService(repo).status_counts(start=date(2024, 3, 1), end=date(2024, 3, 31))

    assert stats.counts["ncns"] == 2
    assert stats.counts["advised_absence"] == 1
    assert stats.counts["on_time"] == 0
    assert stats.total == 3
    assert stats.flagged == 2
    assert stats.to_dict()["start"] == "2024-03-01"


def test_reversed_range_rejected():
    with pytest.raises(ValidationError):
        StatisticsService(InMemoryAttendance()).status_counts(start=date(2024, 3, 2), end=date(2024, 3, 1))

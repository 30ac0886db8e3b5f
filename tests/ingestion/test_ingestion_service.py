from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.bio_attendance.bio_attendance.core.enums import AttendanceStatus, ReviewReason, ShiftType
from src.bio_attendance.bio_attendance.core.exceptions import IngestionError, ValidationError
from src.bio_attendance.bio_attendance.employees.model import Employee
from tests.fakes import InMemoryAttendance, build_services, export_text, make_assignment

ANNA = Employee(1, "Anna", "Cabarliza")
PEDRO = Employee(2, "Pedro", "Ogao-Ogao")
GRAVEYARD = make_assignment(1, time(0, 0), time(9, 0), shift_type=ShiftType.GRAVEYARD)
MORNING = make_assignment(2, time(8, 0), time(17, 0))


def _upload(services, rows, file_date, site_id=1):
    return services.ingestion.ingest_bytes(
        export_text(rows).encode("utf-8"), file_date=file_date, site_id=site_id, file_name="export.txt"
    )


def test_graveyard_shift_completed_across_two_uploads():
    services = build_services([ANNA], [GRAVEYARD])

    first = _upload(services, [("Cabarliza A", "2024-03-05 09:00:17"), ("Cabarliza A", "2024-03-05 22:28:55")], date(2024, 3, 5))
    pending = services.attendance.get(1, date(2024, 3, 5))
    assert first.matched == 2
    assert pending.status == AttendanceStatus.FAILED_BIO_OUT

    _upload(services, [("Cabarliza A", "2024-03-06 09:30:00")], date(2024, 3, 6))

    prior = services.attendance.get(1, date(2024, 3, 4))
    assert prior.time_in is None
    assert prior.time_out == datetime(2024, 3, 5, 9, 0, 17)
    assert prior.status == AttendanceStatus.FAILED_BIO_IN

    current = services.attendance.get(1, date(2024, 3, 5))
    assert current.time_in == datetime(2024, 3, 5, 22, 28, 55)
    assert current.time_out == datetime(2024, 3, 6, 9, 30)
    assert current.status == AttendanceStatus.ON_TIME
    assert services.attendance.get(1, date(2024, 3, 6)) is None


def test_upload_order_does_not_matter():
    services = build_services([ANNA], [GRAVEYARD])

    _upload(services, [("Cabarliza A", "2024-03-06 09:30:00")], date(2024, 3, 6))
    _upload(services, [("Cabarliza A", "2024-03-05 09:00:17"), ("Cabarliza A", "2024-03-05 22:28:55")], date(2024, 3, 5))

    current = services.attendance.get(1, date(2024, 3, 5))
    assert current.time_in == datetime(2024, 3, 5, 22, 28, 55)
    assert current.time_out == datetime(2024, 3, 6, 9, 30)
    assert current.status == AttendanceStatus.ON_TIME


def test_reprocessing_the_same_file_changes_nothing():
    services = build_services([PEDRO], [MORNING])
    rows = [("Ogao-Ogao", "2024-03-04 07:55:00"), ("Ogao-Ogao", "2024-03-04 17:02:00")]

    _upload(services, rows, date(2024, 3, 4))
    before = dict(services.attendance.by_key)
    again = _upload(services, rows, date(2024, 3, 4))

    assert services.attendance.by_key == before
    assert again.matched == 2
    assert again.duplicates == 0
    assert before[(2, date(2024, 3, 4))].status == AttendanceStatus.ON_TIME


def test_reprocessing_keeps_scans_that_fit_both_slots_in_place():
    services = build_services([PEDRO], [MORNING])
    rows = [("Ogao-Ogao", "2024-03-04 08:05:00"), ("Ogao-Ogao", "2024-03-04 11:00:00")]

    _upload(services, rows, date(2024, 3, 4))
    before = dict(services.attendance.by_key)
    again = _upload(services, rows, date(2024, 3, 4))

    record = services.attendance.get(2, date(2024, 3, 4))
    assert services.attendance.by_key == before
    assert again.duplicates == 0
    assert record.time_in == datetime(2024, 3, 4, 8, 5)
    assert record.time_out == datetime(2024, 3, 4, 11, 0)
    assert record.notes is None


def test_second_time_in_is_kept_as_note():
    services = build_services([PEDRO], [MORNING])

    summary = _upload(services, [("Ogao-Ogao", "2024-03-04 07:55:00"), ("Ogao-Ogao", "2024-03-04 07:58:00")], date(2024, 3, 4))

    record = services.attendance.get(2, date(2024, 3, 4))
    assert summary.duplicates == 1
    assert record.time_in == datetime(2024, 3, 4, 7, 55)
    assert record.note_lines() == ["duplicate time_in scan 2024-03-04 07:58:00 ignored"]


def test_scans_far_from_file_date_are_only_audited():
    services = build_services([PEDRO], [MORNING])

    summary = _upload(services, [("Ogao-Ogao", "2024-03-01 07:55:00"), ("Ogao-Ogao", "2024-03-04 07:55:00")], date(2024, 3, 4))

    assert summary.outside_range == 1
    assert summary.matched == 1
    assert services.attendance.get(2, date(2024, 3, 1)) is None
    assert len(services.audit_repo.entries) == 2


def test_file_date_filter_can_be_disabled():
    services = build_services([PEDRO], [MORNING], filter_by_file_date=False)

    summary = _upload(services, [("Ogao-Ogao", "2024-03-01 07:55:00")], date(2024, 3, 4))

    assert summary.outside_range == 0
    assert services.attendance.get(2, date(2024, 3, 1)) is not None


def test_missing_file_date_rejects_batch():
    services = build_services([PEDRO], [MORNING])

    with pytest.raises(IngestionError):
        services.ingestion.ingest_bytes(export_text([]).encode(), file_date=None)
    assert services.uploads.items == {}


def test_unmatched_and_unplaceable_scans_go_to_review():
    services = build_services([ANNA, PEDRO], [MORNING])

    summary = _upload(
        services,
        [
            ("Nobody Here", "2024-03-04 08:00:00"),
            ("Ogao-Ogao", "2024-03-04 03:30:00"),
            ("Cabarliza A", "2024-03-04 08:00:00"),
        ],
        date(2024, 3, 4),
    )

    assert summary.unmatched == 1
    assert summary.flagged == 2
    assert summary.matched == 0
    reasons = {s.raw_name: s.reason for s in services.unresolved.list_open()}
    assert reasons == {
        "Nobody Here": ReviewReason.UNMATCHED_NAME,
        "Ogao-Ogao": ReviewReason.OUT_OF_WINDOW,
        "Cabarliza A": ReviewReason.NO_ASSIGNMENT,
    }
    assert [e.employee_id for e in services.audit_repo.entries] == [2, None, 1]


def test_ambiguous_name_lists_candidates():
    maria = Employee(8, "Maria", "Reyes")
    mario = Employee(9, "Mario", "Reyes")
    services = build_services([maria, mario], [make_assignment(8, time(8, 0), time(17, 0)), make_assignment(9, time(8, 0), time(17, 0))])

    summary = _upload(services, [("Reyes M", "2024-03-04 08:00:00")], date(2024, 3, 4))

    assert summary.ambiguous == 1
    assert summary.flagged == 1
    (pending,) = services.unresolved.list_open()
    assert pending.reason == ReviewReason.AMBIGUOUS_NAME
    assert pending.candidate_ids == (8, 9)


def test_cross_site_punches_are_flagged():
    services = build_services([PEDRO], [MORNING])

    _upload(services, [("Ogao-Ogao", "2024-03-04 07:55:00")], date(2024, 3, 4), site_id=1)
    _upload(services, [("Ogao-Ogao", "2024-03-04 17:02:00")], date(2024, 3, 4), site_id=2)

    record = services.attendance.get(2, date(2024, 3, 4))
    assert record.status == AttendanceStatus.ON_TIME
    assert record.cross_site
    assert services.verification.queue().records == [record]


def test_parse_warnings_reach_summary_and_upload():
    services = build_services([PEDRO], [MORNING])
    text = export_text([("Ogao-Ogao", "2024-03-04 07:55:00")]) + "9\t1\tbroken\r\n"

    summary = services.ingestion.ingest_bytes(text.encode(), file_date=date(2024, 3, 4))

    assert len(summary.warnings) == 1
    assert summary.matched == 1
    assert services.uploads.get(summary.upload_id).warnings == 1


class LosingAttendance(InMemoryAttendance):
    def fill_slot(self, attendance_id, slot, timestamp, site_id):
        return False


def test_merge_conflict_flags_the_scan_and_keeps_the_batch_going():
    services = build_services([PEDRO], [MORNING], attendance=LosingAttendance())

    summary = _upload(services, [("Ogao-Ogao", "2024-03-04 07:55:00"), ("Ogao-Ogao", "2024-03-04 17:02:00")], date(2024, 3, 4))

    assert summary.matched == 0
    assert summary.flagged == 2
    assert [e.employee_id for e in services.audit_repo.entries] == [2, 2]
    assert services.uploads.get(summary.upload_id).flagged == 2
    assert [s.reason for s in services.unresolved.list_open()] == [ReviewReason.MERGE_CONFLICT] * 2


def test_failed_batch_still_records_trail_and_upload(monkeypatch):
    services = build_services([PEDRO], [MORNING])

    def unavailable(employee_id):
        raise RuntimeError("schedule store unavailable")

    monkeypatch.setattr(services.schedules, "get_active_for_employee", unavailable)
    with pytest.raises(RuntimeError):
        _upload(services, [("Ogao-Ogao", "2024-03-04 07:55:00"), ("Ogao-Ogao", "2024-03-04 17:02:00")], date(2024, 3, 4))

    assert len(services.audit_repo.entries) == 2
    assert services.uploads.get(1).total_scans == 2


def test_reprocess_places_scans_once_an_assignment_exists():
    services = build_services([PEDRO], [])
    rows = [("Ogao-Ogao", "2024-03-04 07:55:00"), ("Ogao-Ogao", "2024-03-04 17:02:00"), ("Ogao-Ogao", "2024-03-05 07:50:00")]
    first = _upload(services, rows, date(2024, 3, 4))
    assert first.flagged == 3
    services.schedules.items.append(MORNING)

    preview = services.ingestion.reprocess(start=date(2024, 3, 4), end=date(2024, 3, 4), dry_run=True)

    assert preview.total_scans == 2
    assert preview.employees == {2: 2}
    assert preview.applied is None
    assert services.attendance.get(2, date(2024, 3, 4)) is None

    result = services.ingestion.reprocess(start=date(2024, 3, 4), end=date(2024, 3, 4))

    record = services.attendance.get(2, date(2024, 3, 4))
    assert result.applied.matched == 2
    assert record.time_in == datetime(2024, 3, 4, 7, 55)
    assert record.time_out == datetime(2024, 3, 4, 17, 2)
    assert record.status == AttendanceStatus.ON_TIME
    assert services.attendance.get(2, date(2024, 3, 5)) is None
    assert len(services.uploads.items) == 1
    assert len(services.audit_repo.entries) == 3


def test_reprocess_leaves_merged_records_alone():
    services = build_services([PEDRO], [MORNING])
    _upload(services, [("Ogao-Ogao", "2024-03-04 08:05:00"), ("Ogao-Ogao", "2024-03-04 11:00:00")], date(2024, 3, 4))
    before = dict(services.attendance.by_key)

    result = services.ingestion.reprocess(start=date(2024, 3, 1), end=date(2024, 3, 31))

    assert services.attendance.by_key == before
    assert result.applied.duplicates == 0
    assert result.to_dict()["employees"] == {"2": 2}


def test_reprocess_rejects_inverted_range():
    services = build_services([PEDRO], [MORNING])

    with pytest.raises(ValidationError):
        services.ingestion.reprocess(start=date(2024, 3, 5), end=date(2024, 3, 4))

from __future__ import annotations

from datetime import date, time
from types import SimpleNamespace

from flask import Flask

from src.bio_attendance.bio_attendance.core.enums import AttendanceStatus
from src.bio_attendance.bio_attendance.employees.model import Employee
from src.bio_attendance.bio_attendance.maintenance.commands import register
from tests.fakes import build_services, export_text, make_assignment


def _app(services):
    container = SimpleNamespace(
        ingestion_service=services.ingestion,
        audit_service=services.audit,
        reconciliation_service=services.reconciliation,
    )
    app = Flask(__name__)
    register(app, container)
    return app


def test_ingest_file_command(tmp_path):
    services = build_services([Employee(2, "Pedro", "Ogao-Ogao")], [make_assignment(2, time(8, 0), time(17, 0))])
    export = tmp_path / "dump.txt"
    export.write_text(export_text([("Ogao-Ogao", "2024-03-04 07:55:00")]), encoding="utf-8")

    result = _app(services).test_cli_runner().invoke(
        args=["ingest-file", str(export), "--file-date", "2024-03-04", "--site", "2"]
    )

    assert result.exit_code == 0, result.output
    assert '"matched": 1' in result.output
    assert services.attendance.get(2, date(2024, 3, 4)).site_in == 2
    assert services.uploads.get(1).file_name == "dump.txt"


def test_ingest_file_rejects_bad_date(tmp_path):
    services = build_services([], [])
    export = tmp_path / "dump.txt"
    export.write_text("", encoding="utf-8")

    result = _app(services).test_cli_runner().invoke(args=["ingest-file", str(export), "--file-date", "04/03/2024"])

    assert result.exit_code != 0
    assert services.uploads.items == {}


def test_audit_cleanup_rejects_zero_days():
    result = _app(build_services([], [])).test_cli_runner().invoke(args=["audit-cleanup", "--days", "0"])

    assert result.exit_code != 0
    assert "Retention must be at least one day" in result.output


def test_detect_absences_command():
    services = build_services([Employee(2, "Pedro", "Ogao-Ogao")], [make_assignment(2, time(8, 0), time(17, 0))])

    result = _app(services).test_cli_runner().invoke(args=["detect-absences", "--date", "2024-03-04"])

    assert result.exit_code == 0
    assert "Created 1 ncns record(s)" in result.output
    assert services.attendance.get(2, date(2024, 3, 4)).status == AttendanceStatus.NCNS


def test_reprocess_command_dry_run_then_apply():
    services = build_services([Employee(2, "Pedro", "Ogao-Ogao")], [])
    services.ingestion.ingest_bytes(export_text([("Ogao-Ogao", "2024-03-04 07:55:00")]).encode(), file_date=date(2024, 3, 4))
    services.schedules.items.append(make_assignment(2, time(8, 0), time(17, 0)))
    runner = _app(services).test_cli_runner()

    preview = runner.invoke(args=["reprocess", "--start", "2024-03-04", "--end", "2024-03-04", "--dry-run"])
    assert preview.exit_code == 0, preview.output
    assert '"dry_run": true' in preview.output
    assert services.attendance.get(2, date(2024, 3, 4)) is None

    applied = runner.invoke(args=["reprocess", "--start", "2024-03-04", "--end", "2024-03-04"])
    assert applied.exit_code == 0, applied.output
    assert services.attendance.get(2, date(2024, 3, 4)).time_in.hour == 7


def test_reprocess_command_rejects_inverted_range():
    result = _app(build_services([], [])).test_cli_runner().invoke(
        args=["reprocess", "--start", "2024-03-05", "--end", "2024-03-04"]
    )

    assert result.exit_code != 0
    assert "end must not be before start" in result.output

"""Flask CLI commands for batch jobs.

    flask --app bio_attendance.main:create_app ingest-file dump.txt --file-date 2024-03-04 --site 2
    flask --app bio_attendance.main:create_app audit-cleanup          # daily cron
    flask --app bio_attendance.main:create_app reprocess --start 2024-03-01 --end 2024-03-31 --dry-run
"""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

import click
from flask import Flask, current_app

from ..container import Container
from ..core.exceptions import DomainError
from ..database.bootstrap import apply_schema, list_tables


def _date(ctx, param, value):
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD") from None


def register(app: Flask, container: Container) -> None:
    @app.cli.command("ingest-file")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False))
    @click.option("--file-date", callback=_date, required=True, help="Declared date of the export (YYYY-MM-DD).")
    @click.option("--site", "site_id", type=int, default=None, help="Site the device belongs to.")
    def ingest_file(path: str, file_date: date, site_id):
        """Parse a device export and reconcile its scans."""
        try:
            summary = container.ingestion_service.ingest_file(path, file_date=file_date, site_id=site_id)
        except DomainError as e:
            raise click.ClickException(str(e)) from e
        click.echo(json.dumps(summary.to_dict(), indent=2))

    @app.cli.command("reprocess")
    @click.option("--start", callback=_date, required=True, help="First scan date to replay (YYYY-MM-DD).")
    @click.option("--end", callback=_date, required=True, help="Last scan date to replay (YYYY-MM-DD).")
    @click.option("--dry-run", is_flag=True, help="Resolve names only, write nothing.")
    def reprocess(start: date, end: date, dry_run: bool):
        """Replay stored scans for a date range through matching and merging."""
        try:
            result = container.ingestion_service.reprocess(start=start, end=end, dry_run=dry_run)
        except DomainError as e:
            raise click.ClickException(str(e)) from e
        click.echo(json.dumps(result.to_dict(), indent=2))

    @app.cli.command("audit-cleanup")
    @click.option("--days", type=int, default=None, help="Retention window in days (default from settings).")
    def audit_cleanup(days):
        """Delete audit-trail scans older than the retention window."""
        try:
            removed = container.audit_service.cleanup(retention_days=days)
        except DomainError as e:
            raise click.ClickException(str(e)) from e
        click.echo(f"Removed {removed} scan(s)")

    @app.cli.command("detect-absences")
    @click.option("--date", "shift_date", callback=_date, required=True, help="Shift-date to check (YYYY-MM-DD).")
    def detect_absences(shift_date: date):
        """Create ncns records for scheduled employees with no punches."""
        created = container.reconciliation_service.mark_absences(shift_date)
        click.echo(f"Created {created} ncns record(s)")

    @app.cli.command("init-db")
    def init_db():
        """Apply database/schema.sql (idempotent)."""
        db_config = current_app.config["DB_CONFIG"]
        schema_path = Path(current_app.config["SCHEMA_PATH"])
        apply_schema(db_config, schema_path=schema_path)
        click.echo(f"Schema ready ({len(list_tables(db_config))} tables)")

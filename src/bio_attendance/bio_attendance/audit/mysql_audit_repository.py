from __future__ import annotations

from datetime import date
from typing import Sequence

from ..core.enums import ScanMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from ..ingestion.model import RawScan
from .model import AuditEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append_many(self, entries: Sequence[AuditEntry]) -> int:
        if not entries:
            return 0
        rows = [
            (
                e.upload_id,
                e.site_id,
                e.scan.device_id,
                e.scan.raw_name,
                e.scan.mode.value,
                e.scan.timestamp,
                e.record_date,
                e.employee_id,
            )
            for e in entries
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO biometric_scans(upload_id, site_id, device_id, raw_name, mode, scanned_at, record_date, employee_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                rows,
            )
            return len(rows)

    def delete_older_than(self, cutoff: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM biometric_scans WHERE record_date < %s", (cutoff,))
            return int(cur.rowcount)

    def list_for_upload(self, upload_id: int) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT scan_id, upload_id, site_id, device_id, raw_name, mode, scanned_at, employee_id
                FROM biometric_scans
                WHERE upload_id=%s
                ORDER BY scanned_at ASC, scan_id ASC
                """,
                (int(upload_id),),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def list_between(self, start: date, end: date) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT scan_id, upload_id, site_id, device_id, raw_name, mode, scanned_at, employee_id
                FROM biometric_scans
                WHERE record_date BETWEEN %s AND %s
                ORDER BY scanned_at ASC, scan_id ASC
                """,
                (start, end),
            )
            return [_to_entry(r) for r in fetchall(cur)]


def _to_entry(r: dict) -> AuditEntry:
    return AuditEntry(
        scan=RawScan(
            device_id=r.get("device_id") or "",
            raw_name=r["raw_name"],
            mode=ScanMode(r["mode"]),
            timestamp=r["scanned_at"],
        ),
        upload_id=r.get("upload_id"),
        site_id=r.get("site_id"),
        employee_id=r.get("employee_id"),
        scan_id=int(r["scan_id"]),
    )

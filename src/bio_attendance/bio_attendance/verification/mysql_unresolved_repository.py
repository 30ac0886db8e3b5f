from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import ReviewReason, ScanMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import UnresolvedScan
from .repository import UnresolvedScanRepository

_COLUMNS = """
    unresolved_id, upload_id, site_id, device_id, raw_name, mode, scanned_at,
    reason, candidate_ids, employee_id, resolved
"""


def _to_scan(r: Dict[str, Any]) -> UnresolvedScan:
    ids = r.get("candidate_ids") or ""
    return UnresolvedScan(
        unresolved_id=int(r["unresolved_id"]),
        upload_id=r.get("upload_id"),
        site_id=r.get("site_id"),
        device_id=r.get("device_id"),
        raw_name=r["raw_name"],
        mode=ScanMode(r["mode"]),
        scanned_at=r["scanned_at"],
        reason=ReviewReason(r["reason"]),
        candidate_ids=tuple(int(x) for x in ids.split(",") if x.strip()),
        employee_id=r.get("employee_id"),
        resolved=bool(r.get("resolved")),
    )


class MySQLUnresolvedScanRepository(UnresolvedScanRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, scan: UnresolvedScan) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO unresolved_scans(
                    upload_id, site_id, device_id, raw_name, mode, scanned_at, reason, candidate_ids, employee_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    scan.upload_id,
                    scan.site_id,
                    scan.device_id,
                    scan.raw_name,
                    scan.mode.value,
                    scan.scanned_at,
                    scan.reason.value,
                    ",".join(str(i) for i in scan.candidate_ids) or None,
                    scan.employee_id,
                ),
            )
            return cur.rowcount > 0

    def get(self, unresolved_id: int) -> Optional[UnresolvedScan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM unresolved_scans WHERE unresolved_id=%s", (int(unresolved_id),))
            r = fetchone(cur)
            return _to_scan(r) if r else None

    def list_open(self) -> Sequence[UnresolvedScan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM unresolved_scans WHERE resolved=0 ORDER BY scanned_at ASC, unresolved_id ASC"
            )
            return [_to_scan(r) for r in fetchall(cur)]

    def mark_resolved(self, unresolved_id: int, employee_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE unresolved_scans SET resolved=1, employee_id=%s WHERE unresolved_id=%s",
                (employee_id, int(unresolved_id)),
            )
            return cur.rowcount > 0

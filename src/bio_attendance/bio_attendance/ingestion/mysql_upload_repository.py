from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import IngestionSummary, Upload
from .repository import UploadRepository

_COLUMNS = "upload_id, file_name, file_date, site_id, total_scans, matched, unmatched, flagged, warnings, created_at"


def _to_upload(r: Dict[str, Any]) -> Upload:
    return Upload(
        upload_id=int(r["upload_id"]),
        file_name=r.get("file_name"),
        file_date=r["file_date"],
        site_id=r.get("site_id"),
        total_scans=int(r.get("total_scans") or 0),
        matched=int(r.get("matched") or 0),
        unmatched=int(r.get("unmatched") or 0),
        flagged=int(r.get("flagged") or 0),
        warnings=int(r.get("warnings") or 0),
        created_at=r.get("created_at"),
    )


class MySQLUploadRepository(UploadRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, file_name: Optional[str], file_date: date, site_id: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO uploads(file_name, file_date, site_id) VALUES(%s,%s,%s)",
                (file_name, file_date, site_id),
            )
            return int(cur.lastrowid)

    def finish(self, upload_id: int, summary: IngestionSummary) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE uploads
                SET total_scans=%s, matched=%s, unmatched=%s, flagged=%s, warnings=%s
                WHERE upload_id=%s
                """,
                (
                    summary.total_scans,
                    summary.matched,
                    summary.unmatched,
                    summary.flagged,
                    len(summary.warnings),
                    int(upload_id),
                ),
            )

    def get(self, upload_id: int) -> Optional[Upload]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM uploads WHERE upload_id=%s", (int(upload_id),))
            r = fetchone(cur)
            return _to_upload(r) if r else None

    def list_recent(self, limit: int) -> Sequence[Upload]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM uploads ORDER BY upload_id DESC LIMIT %s", (int(limit),))
            return [_to_upload(r) for r in fetchall(cur)]

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional, Sequence, Set

from ..core.constants import DEFAULT_MERGE_MAX_RETRIES
from ..core.enums import FLAGGED_STATUSES, AttendanceStatus, Slot
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, retry_on_conflict
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .strategies.base import StatusDecision

_COLUMNS = """
    attendance_id, employee_id, shift_date, time_in, time_out, site_in, site_out,
    status, secondary_status, tardy_minutes, undertime_minutes, overtime_minutes,
    verified, notes
"""

_SLOT_COLUMNS = {
    Slot.TIME_IN: ("time_in", "site_in"),
    Slot.TIME_OUT: ("time_out", "site_out"),
}


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    secondary = r.get("secondary_status")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        shift_date=r["shift_date"],
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        site_in=r.get("site_in"),
        site_out=r.get("site_out"),
        status=AttendanceStatus(r["status"]),
        secondary_status=AttendanceStatus(secondary) if secondary else None,
        tardy_minutes=r.get("tardy_minutes"),
        undertime_minutes=r.get("undertime_minutes"),
        overtime_minutes=r.get("overtime_minutes"),
        verified=bool(r.get("verified")),
        notes=r.get("notes"),
    )


def _id_params(ids: Iterable[int]):
    values = [int(i) for i in ids]
    return ",".join(["%s"] * len(values)), tuple(values)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, max_retries: int = DEFAULT_MERGE_MAX_RETRIES):
        self._conn_factory = conn_factory
        self.max_retries = int(max_retries)

    def get(self, employee_id: int, shift_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND shift_date=%s",
                (int(employee_id), shift_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    @retry_on_conflict()
    def get_or_create(self, employee_id: int, shift_date: date) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            # No-op update keeps the existing row untouched on a duplicate key.
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, shift_date, status)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE attendance_id=attendance_id
                """,
                (int(employee_id), shift_date, AttendanceStatus.NCNS.value),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND shift_date=%s",
                (int(employee_id), shift_date),
            )
            return _to_record(fetchone(cur))

    @retry_on_conflict()
    def fill_slot(self, attendance_id: int, slot: Slot, timestamp: datetime, site_id: Optional[int]) -> bool:
        time_col, site_col = _SLOT_COLUMNS[slot]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {time_col}=%s, {site_col}=%s
                WHERE attendance_id=%s AND {time_col} IS NULL
                """,
                (timestamp, site_id, int(attendance_id)),
            )
            return cur.rowcount > 0

    @retry_on_conflict()
    def update_notes(self, attendance_id: int, notes: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET notes=%s WHERE attendance_id=%s",
                (notes, int(attendance_id)),
            )

    @retry_on_conflict()
    def update_status(self, attendance_id: int, decision: StatusDecision) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, secondary_status=%s, tardy_minutes=%s,
                    undertime_minutes=%s, overtime_minutes=%s
                WHERE attendance_id=%s
                """,
                (
                    decision.status.value,
                    decision.secondary_status.value if decision.secondary_status else None,
                    decision.tardy_minutes,
                    decision.undertime_minutes,
                    decision.overtime_minutes,
                    int(attendance_id),
                ),
            )

    def update_manual(
        self,
        attendance_id: int,
        *,
        time_in: Optional[datetime],
        time_out: Optional[datetime],
        status: AttendanceStatus,
        notes: Optional[str],
        verified: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET time_in=%s, time_out=%s, status=%s, notes=%s, verified=%s
                WHERE attendance_id=%s
                """,
                (time_in, time_out, status.value, notes, 1 if verified else 0, int(attendance_id)),
            )
            return cur.rowcount > 0

    def mark_advised(self, attendance_ids: Iterable[int]) -> int:
        marks, params = _id_params(attendance_ids)
        if not params:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET status=%s, secondary_status=NULL, verified=1
                WHERE attendance_id IN ({marks})
                """,
                (AttendanceStatus.ADVISED_ABSENCE.value, *params),
            )
            return int(cur.rowcount)

    def delete_many(self, attendance_ids: Iterable[int]) -> int:
        marks, params = _id_params(attendance_ids)
        if not params:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM attendance_records WHERE attendance_id IN ({marks})", params)
            return int(cur.rowcount)

    def list_review(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[AttendanceRecord]:
        flagged = sorted(s.value for s in FLAGGED_STATUSES)
        marks = ",".join(["%s"] * len(flagged))
        clauses = [
            "verified=0",
            f"(status IN ({marks}) OR secondary_status IN ({marks})"
            " OR (site_in IS NOT NULL AND site_out IS NOT NULL AND site_in <> site_out))",
        ]
        params: list[object] = [*flagged, *flagged]
        if start is not None:
            clauses.append("shift_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("shift_date <= %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY shift_date DESC, employee_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def employee_ids_for_date(self, shift_date: date) -> Set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM attendance_records WHERE shift_date=%s", (shift_date,))
            return {int(r["employee_id"]) for r in fetchall(cur)}

    @retry_on_conflict()
    def create_absence(self, employee_id: int, shift_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO attendance_records(employee_id, shift_date, status)
                VALUES(%s,%s,%s)
                """,
                (int(employee_id), shift_date, AttendanceStatus.NCNS.value),
            )
            return cur.rowcount > 0

    def count_by_status(self, *, start: date, end: date) -> Dict[AttendanceStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT status, COUNT(*) AS total
                FROM attendance_records
                WHERE shift_date BETWEEN %s AND %s
                GROUP BY status
                """,
                (start, end),
            )
            return {AttendanceStatus(r["status"]): int(r["total"]) for r in fetchall(cur)}

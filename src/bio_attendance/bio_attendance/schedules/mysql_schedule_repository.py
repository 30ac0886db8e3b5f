from __future__ import annotations

from datetime import date, time
from typing import FrozenSet, Optional, Sequence

from ..core.enums import ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ShiftAssignment
from .repository import ScheduleRepository

_COLUMNS = """
    assignment_id, employee_id, site_id, shift_type, scheduled_time_in, scheduled_time_out,
    work_days, grace_period_minutes, effective_date, end_date, is_active
"""


def _to_assignment(r: dict) -> ShiftAssignment:
    work_days = frozenset(d.strip().lower() for d in (r.get("work_days") or "").split(",") if d.strip())
    return ShiftAssignment(
        assignment_id=int(r["assignment_id"]),
        employee_id=int(r["employee_id"]),
        shift_type=ShiftType(r["shift_type"]),
        scheduled_time_in=normalize_mysql_time(r["scheduled_time_in"]),
        scheduled_time_out=normalize_mysql_time(r["scheduled_time_out"]),
        work_days=work_days,
        grace_period_minutes=int(r.get("grace_period_minutes") or 0),
        effective_date=r.get("effective_date"),
        end_date=r.get("end_date"),
        is_active=bool(r.get("is_active", True)),
        site_id=r.get("site_id"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_for_employee(self, employee_id: int) -> Optional[ShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_assignments
                WHERE employee_id=%s AND is_active=1
                ORDER BY effective_date DESC, assignment_id DESC
                LIMIT 1
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _to_assignment(r) if r else None

    def list_active(self) -> Sequence[ShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_assignments
                WHERE is_active=1
                ORDER BY employee_id ASC, effective_date DESC
                """
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        employee_id: int,
        shift_type: ShiftType,
        scheduled_time_in: time,
        scheduled_time_out: time,
        work_days: FrozenSet[str],
        grace_period_minutes: int,
        effective_date: date,
        end_date: Optional[date] = None,
        site_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE shift_assignments SET is_active=0 WHERE employee_id=%s AND is_active=1",
                (int(employee_id),),
            )
            cur.execute(
                """
                INSERT INTO shift_assignments(
                    employee_id, site_id, shift_type, scheduled_time_in, scheduled_time_out,
                    work_days, grace_period_minutes, effective_date, end_date, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    int(employee_id),
                    site_id,
                    shift_type.value,
                    scheduled_time_in,
                    scheduled_time_out,
                    ",".join(sorted(work_days)),
                    int(grace_period_minutes),
                    effective_date,
                    end_date,
                ),
            )
            return int(cur.lastrowid)

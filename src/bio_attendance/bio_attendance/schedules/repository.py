from __future__ import annotations

from datetime import date, time
from typing import FrozenSet, Optional, Protocol, Sequence

from ..core.enums import ShiftType
from .model import ShiftAssignment


class ScheduleRepository(Protocol):
    def get_active_for_employee(self, employee_id: int) -> Optional[ShiftAssignment]:
        raise NotImplementedError

    def list_active(self) -> Sequence[ShiftAssignment]:
        raise NotImplementedError

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
        """Insert an active assignment and deactivate the employee's previous ones.

        Returns assignment_id.
        """

        raise NotImplementedError

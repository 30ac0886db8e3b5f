from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import FrozenSet, Optional

from ..common.datetime_utils import weekday_name
from ..core.constants import DEFAULT_GRACE_MINUTES
from ..core.enums import ShiftType


@dataclass(frozen=True)
class ShiftAssignment:
    """Lịch ca đang áp dụng cho một nhân viên."""

    assignment_id: int
    employee_id: int
    shift_type: ShiftType
    scheduled_time_in: time
    scheduled_time_out: time
    work_days: FrozenSet[str] = field(default_factory=frozenset)
    grace_period_minutes: int = DEFAULT_GRACE_MINUTES
    effective_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True
    site_id: Optional[int] = None

    def works_on(self, day: date) -> bool:
        return weekday_name(day) in self.work_days

    def covers(self, day: date) -> bool:
        if not self.is_active:
            return False
        if self.effective_date and day < self.effective_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True

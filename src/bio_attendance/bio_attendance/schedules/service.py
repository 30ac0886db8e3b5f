from __future__ import annotations

from datetime import date, time
from typing import Iterable, Optional

from ..core.constants import DEFAULT_GRACE_MINUTES
from ..core.enums import ShiftType
from ..core.exceptions import ValidationError
from .repository import ScheduleRepository

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class ScheduleService:
    """Use case: activate a shift assignment (only one active per employee)."""

    def __init__(self, schedules: ScheduleRepository, *, default_grace_minutes: int = DEFAULT_GRACE_MINUTES):
        self._schedules = schedules
        self._default_grace = int(default_grace_minutes)

    def assign(
        self,
        *,
        employee_id: int,
        shift_type: ShiftType,
        scheduled_time_in: time,
        scheduled_time_out: time,
        work_days: Iterable[str],
        effective_date: date,
        grace_period_minutes: Optional[int] = None,
        end_date: Optional[date] = None,
        site_id: Optional[int] = None,
    ) -> int:
        if grace_period_minutes is None:
            grace_period_minutes = self._default_grace
        if int(employee_id) <= 0:
            raise ValidationError("Invalid employee")

        days = frozenset(d.strip().lower() for d in work_days if d and d.strip())
        unknown = days - set(WEEKDAYS)
        if unknown:
            raise ValidationError(f"Unknown work days: {', '.join(sorted(unknown))}")
        if not days:
            raise ValidationError("At least one work day is required")
        if int(grace_period_minutes) < 0:
            raise ValidationError("Grace period cannot be negative")
        if end_date and end_date < effective_date:
            raise ValidationError("End date is before the effective date")
        if shift_type != ShiftType.UTILITY_24H and scheduled_time_in == scheduled_time_out:
            raise ValidationError("Scheduled time in and out are equal")

        return self._schedules.create(
            employee_id=int(employee_id),
            shift_type=shift_type,
            scheduled_time_in=scheduled_time_in,
            scheduled_time_out=scheduled_time_out,
            work_days=days,
            grace_period_minutes=int(grace_period_minutes),
            effective_date=effective_date,
            end_date=end_date,
            site_id=site_id,
        )

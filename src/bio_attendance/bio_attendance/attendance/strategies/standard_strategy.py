from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ...common.datetime_utils import drop_seconds, whole_minutes
from ...core.constants import (
    HALF_DAY_THRESHOLD_MINUTES,
    OVERTIME_THRESHOLD_MINUTES,
    UNDERTIME_THRESHOLD_MINUTES,
)
from ...core.enums import AttendanceStatus
from ...shifts.model import ScheduledBounds
from ..model import AttendanceRecord
from .base import StatusDecision, StatusStrategy, time_in_pending


class StandardStatusStrategy(StatusStrategy):
    """Lateness against scheduled in + grace, early departure against scheduled out."""

    def decide(
        self,
        *,
        record: AttendanceRecord,
        bounds: ScheduledBounds,
        grace_minutes: int,
        as_of: Optional[datetime] = None,
    ) -> StatusDecision:
        time_in, time_out = record.time_in, record.time_out

        if time_in is None and time_out is None:
            return StatusDecision(status=AttendanceStatus.NCNS)

        overtime = None
        if time_out is not None:
            over = whole_minutes(drop_seconds(time_out) - bounds.time_out)
            overtime = over if over > OVERTIME_THRESHOLD_MINUTES else None

        if time_in is None:
            return StatusDecision(status=AttendanceStatus.FAILED_BIO_IN, overtime_minutes=overtime)

        lateness = whole_minutes(
            drop_seconds(time_in) - (bounds.time_in + timedelta(minutes=grace_minutes))
        )
        if lateness <= 0:
            primary = AttendanceStatus.ON_TIME
        elif lateness <= HALF_DAY_THRESHOLD_MINUTES:
            primary = AttendanceStatus.TARDY
        else:
            primary = AttendanceStatus.HALF_DAY
        tardy = lateness if lateness > 0 else None

        if time_out is None:
            if time_in_pending(bounds, as_of):
                return StatusDecision(status=primary, tardy_minutes=tardy)
            return _with_secondary(primary, AttendanceStatus.FAILED_BIO_OUT, tardy_minutes=tardy)

        early = whole_minutes(bounds.time_out - drop_seconds(time_out))
        if early >= UNDERTIME_THRESHOLD_MINUTES:
            return _with_secondary(
                primary,
                AttendanceStatus.UNDERTIME,
                tardy_minutes=tardy,
                undertime_minutes=early,
            )
        return StatusDecision(status=primary, tardy_minutes=tardy, overtime_minutes=overtime)


def _with_secondary(primary: AttendanceStatus, flag: AttendanceStatus, **minutes) -> StatusDecision:
    # The flag replaces a clean on_time; otherwise it rides along as secondary.
    if primary == AttendanceStatus.ON_TIME:
        return StatusDecision(status=flag, **minutes)
    return StatusDecision(status=primary, secondary_status=flag, **minutes)

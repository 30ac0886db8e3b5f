from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ...common.datetime_utils import whole_minutes
from ...core.constants import UTILITY_MIN_WORKED_HOURS
from ...core.enums import AttendanceStatus
from ...shifts.model import ScheduledBounds
from ..model import AttendanceRecord
from .base import StatusDecision, StatusStrategy, time_in_pending


class UtilityStatusStrategy(StatusStrategy):
    """24h utility shifts: no lateness, only minimum hours worked."""

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
        if time_in is None:
            return StatusDecision(status=AttendanceStatus.FAILED_BIO_IN)
        if time_out is None:
            if time_in_pending(bounds, as_of):
                return StatusDecision(status=AttendanceStatus.ON_TIME)
            return StatusDecision(status=AttendanceStatus.FAILED_BIO_OUT)

        shortfall = (time_out - time_in) - timedelta(hours=UTILITY_MIN_WORKED_HOURS)
        if shortfall >= timedelta(0):
            return StatusDecision(status=AttendanceStatus.ON_TIME)
        return StatusDecision(status=AttendanceStatus.UNDERTIME, undertime_minutes=-whole_minutes(shortfall))

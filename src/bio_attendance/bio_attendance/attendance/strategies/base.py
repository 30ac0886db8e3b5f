from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import ScheduledBounds
from ..model import AttendanceRecord


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    secondary_status: Optional[AttendanceStatus] = None
    tardy_minutes: Optional[int] = None
    undertime_minutes: Optional[int] = None
    overtime_minutes: Optional[int] = None


class StatusStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide(
        self,
        *,
        record: AttendanceRecord,
        bounds: ScheduledBounds,
        grace_minutes: int,
        as_of: Optional[datetime] = None,
    ) -> StatusDecision:
        raise NotImplementedError


def time_in_pending(bounds: ScheduledBounds, as_of: Optional[datetime]) -> bool:
    """True while a lone time-in may still be completed (shift not over yet)."""
    return as_of is not None and as_of < bounds.time_out

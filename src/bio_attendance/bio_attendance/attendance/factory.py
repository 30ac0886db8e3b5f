from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import ShiftType
from ..schedules.model import ShiftAssignment
from .strategies.base import StatusStrategy
from .strategies.standard_strategy import StandardStatusStrategy
from .strategies.utility_strategy import UtilityStatusStrategy


@dataclass
class StatusStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_assignment(self, assignment: ShiftAssignment) -> StatusStrategy:
        if assignment.shift_type == ShiftType.UTILITY_24H:
            return UtilityStatusStrategy()
        return StandardStatusStrategy()

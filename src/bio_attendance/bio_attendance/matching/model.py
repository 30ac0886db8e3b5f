from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.enums import MatchOutcome
from ..employees.model import Employee


@dataclass(frozen=True)
class NameMatchResult:
    raw_name: str
    outcome: MatchOutcome
    employee: Optional[Employee] = None
    candidates: Tuple[Employee, ...] = ()
    strategy: Optional[str] = None

    @property
    def candidate_ids(self) -> Tuple[int, ...]:
        return tuple(c.employee_id for c in self.candidates)

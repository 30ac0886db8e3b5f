from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from ..core.enums import MatchOutcome
from ..employees.model import Employee
from ..schedules.model import ShiftAssignment
from ..shifts.classifier import ShiftWindowClassifier
from .model import NameMatchResult
from .normalize import name_tokens, normalize_name
from .strategies.base import NameMatchStrategy

logger = logging.getLogger(__name__)

AssignmentLookup = Callable[[int], Optional[ShiftAssignment]]


class NameResolver:
    """Resolve device names to employees.

    Strategies run in order; the first one that yields exactly one employee
    wins. When every strategy leaves several candidates, the narrowest set is
    filtered by whose shift window contains the scan time. Results that did
    not need the timestamp are cached until the next batch.
    """

    def __init__(
        self,
        strategies: Sequence[NameMatchStrategy],
        *,
        assignment_for: Optional[AssignmentLookup] = None,
        classifier: Optional[ShiftWindowClassifier] = None,
    ):
        self._strategies = list(strategies)
        self._assignment_for = assignment_for
        self._classifier = classifier or ShiftWindowClassifier()
        self._employees: List[Employee] = []
        self._cache: Dict[str, NameMatchResult] = {}

    def begin_batch(self, employees: Sequence[Employee]) -> None:
        self._employees = [e for e in employees if e.is_active]
        self._cache.clear()

    def resolve(self, raw_name: str, timestamp: Optional[datetime] = None) -> NameMatchResult:
        key = normalize_name(raw_name)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        by_name = self._match_by_name(raw_name)
        if by_name.outcome != MatchOutcome.AMBIGUOUS:
            self._cache[key] = by_name
            if by_name.outcome == MatchOutcome.UNMATCHED:
                logger.warning("No employee matches device name %r", raw_name)
            return by_name

        return self._break_tie(by_name, timestamp)

    def _match_by_name(self, raw_name: str) -> NameMatchResult:
        tokens = name_tokens(raw_name)
        if not tokens:
            return NameMatchResult(raw_name=raw_name, outcome=MatchOutcome.UNMATCHED)

        narrowest: List[Employee] = []
        narrowest_strategy = None
        for strategy in self._strategies:
            found = strategy.match(tokens, self._employees)
            if len(found) == 1:
                return NameMatchResult(
                    raw_name=raw_name,
                    outcome=MatchOutcome.RESOLVED,
                    employee=found[0],
                    candidates=tuple(found),
                    strategy=strategy.name,
                )
            if found and (not narrowest or len(found) < len(narrowest)):
                narrowest, narrowest_strategy = found, strategy.name

        if not narrowest:
            return NameMatchResult(raw_name=raw_name, outcome=MatchOutcome.UNMATCHED)
        return NameMatchResult(
            raw_name=raw_name,
            outcome=MatchOutcome.AMBIGUOUS,
            candidates=tuple(sorted(narrowest, key=lambda e: e.employee_id)),
            strategy=narrowest_strategy,
        )

    def _break_tie(self, ambiguous: NameMatchResult, timestamp: Optional[datetime]) -> NameMatchResult:
        if timestamp is not None and self._assignment_for is not None:
            in_window = []
            for candidate in ambiguous.candidates:
                assignment = self._assignment_for(candidate.employee_id)
                if assignment is None or not assignment.covers(timestamp.date()):
                    continue
                if self._classifier.in_window(assignment, timestamp):
                    in_window.append(candidate)
            if len(in_window) == 1:
                return NameMatchResult(
                    raw_name=ambiguous.raw_name,
                    outcome=MatchOutcome.RESOLVED,
                    employee=in_window[0],
                    candidates=ambiguous.candidates,
                    strategy="shift_window",
                )

        logger.warning(
            "Ambiguous device name %r at %s: candidates %s",
            ambiguous.raw_name,
            timestamp,
            list(ambiguous.candidate_ids),
        )
        return ambiguous

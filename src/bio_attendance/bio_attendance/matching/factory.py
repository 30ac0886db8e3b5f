from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Type

from ..core.constants import DEFAULT_NAME_MATCH_PRECEDENCE
from ..core.exceptions import ValidationError
from .strategies.base import NameMatchStrategy
from .strategies.full_name_strategy import FullNameStrategy
from .strategies.initial_strategy import InitialStrategy
from .strategies.two_letter_strategy import TwoLetterStrategy
from .strategies.unique_surname_strategy import UniqueSurnameStrategy

STRATEGIES: Dict[str, Type[NameMatchStrategy]] = {
    cls.name: cls
    for cls in (FullNameStrategy, UniqueSurnameStrategy, TwoLetterStrategy, InitialStrategy)
}


@dataclass
class NameMatchStrategyFactory:
    """Factory Pattern: build the ordered matcher cascade from configured names."""

    precedence: Sequence[str] = DEFAULT_NAME_MATCH_PRECEDENCE

    def build(self) -> List[NameMatchStrategy]:
        unknown = [n for n in self.precedence if n not in STRATEGIES]
        if unknown:
            raise ValidationError(f"Unknown name match strategies: {', '.join(unknown)}")
        if not self.precedence:
            raise ValidationError("NAME_MATCH_PRECEDENCE must list at least one strategy")
        return [STRATEGIES[n]() for n in dict.fromkeys(self.precedence)]

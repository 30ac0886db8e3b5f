from __future__ import annotations

from typing import List, Sequence

from ...employees.model import Employee
from .base import NameMatchStrategy, surname_tokens


class UniqueSurnameStrategy(NameMatchStrategy):
    """Trailing token(s) of the device name equal an employee's surname."""

    name = "unique_surname"

    def match(self, tokens: Sequence[str], employees: Sequence[Employee]) -> List[Employee]:
        found = []
        for emp in employees:
            surname = surname_tokens(emp)
            if surname and len(tokens) >= len(surname) and list(tokens[-len(surname) :]) == surname:
                found.append(emp)
        return found

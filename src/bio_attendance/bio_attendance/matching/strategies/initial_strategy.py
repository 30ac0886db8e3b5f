from __future__ import annotations

from typing import List, Sequence

from ...employees.model import Employee
from .base import NameMatchStrategy, given_tokens, split_surname_prefix


class InitialStrategy(NameMatchStrategy):
    """"Surname I": leading surname, given name starting with the initial."""

    name = "initial"

    def match(self, tokens: Sequence[str], employees: Sequence[Employee]) -> List[Employee]:
        found = []
        for emp in employees:
            rest = split_surname_prefix(tokens, emp)
            given = given_tokens(emp)
            if not rest or not given:
                continue
            if given[0].startswith(rest[0][0]):
                found.append(emp)
        return found

from __future__ import annotations

from typing import List, Sequence

from ...employees.model import Employee
from .base import NameMatchStrategy, given_tokens, split_surname_prefix


class TwoLetterStrategy(NameMatchStrategy):
    """"Surname Xx": leading surname, given name starting with the two letters."""

    name = "two_letter"

    def match(self, tokens: Sequence[str], employees: Sequence[Employee]) -> List[Employee]:
        found = []
        for emp in employees:
            rest = split_surname_prefix(tokens, emp)
            given = given_tokens(emp)
            if not rest or not given or len(rest[0]) < 2:
                continue
            if given[0].startswith(rest[0][:2]):
                found.append(emp)
        return found

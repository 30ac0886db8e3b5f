from __future__ import annotations

from typing import List, Sequence

from ...employees.model import Employee
from .base import NameMatchStrategy, given_tokens, surname_tokens


class FullNameStrategy(NameMatchStrategy):
    """Exact "Surname Given" or "Given Surname", full given name or first word only."""

    name = "full_name"

    def match(self, tokens: Sequence[str], employees: Sequence[Employee]) -> List[Employee]:
        wanted = list(tokens)
        found = []
        for emp in employees:
            surname = surname_tokens(emp)
            given = given_tokens(emp)
            if not surname or not given:
                continue
            forms = (surname + given, given + surname, surname + given[:1], given[:1] + surname)
            if any(wanted == form for form in forms):
                found.append(emp)
        return found

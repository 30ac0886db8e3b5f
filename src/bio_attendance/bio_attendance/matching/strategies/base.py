from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from ...employees.model import Employee
from ..normalize import name_tokens


class NameMatchStrategy(ABC):
    """Strategy Pattern: one way of reading a device-rendered name."""

    name: str = ""

    @abstractmethod
    def match(self, tokens: Sequence[str], employees: Sequence[Employee]) -> List[Employee]:
        """Return every employee this pattern accepts (empty when it does not apply)."""

        raise NotImplementedError


def surname_tokens(employee: Employee) -> List[str]:
    return name_tokens(employee.last_name)


def given_tokens(employee: Employee) -> List[str]:
    return name_tokens(employee.first_name)


def split_surname_prefix(tokens: Sequence[str], employee: Employee):
    """Return the tokens after a leading surname, or None if the name does not start with it."""
    surname = surname_tokens(employee)
    if not surname or list(tokens[: len(surname)]) != surname:
        return None
    return list(tokens[len(surname) :])

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Thực thể miền (domain): nhân viên được đối chiếu từ tên trên máy chấm công."""

    employee_id: int
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    is_active: bool = True

    @property
    def canonical_name(self) -> str:
        return f"{self.last_name}, {self.first_name}"

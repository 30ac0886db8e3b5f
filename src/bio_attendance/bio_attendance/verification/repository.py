from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import UnresolvedScan


class UnresolvedScanRepository(Protocol):
    def add(self, scan: UnresolvedScan) -> bool:
        """Store a scan for review; re-adding the same (name, time, reason) is a no-op."""

        raise NotImplementedError

    def get(self, unresolved_id: int) -> Optional[UnresolvedScan]:
        raise NotImplementedError

    def list_open(self) -> Sequence[UnresolvedScan]:
        raise NotImplementedError

    def mark_resolved(self, unresolved_id: int, employee_id: Optional[int]) -> bool:
        raise NotImplementedError

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import IngestionSummary, Upload


class UploadRepository(Protocol):
    def create(self, *, file_name: Optional[str], file_date: date, site_id: Optional[int]) -> int:
        raise NotImplementedError

    def finish(self, upload_id: int, summary: IngestionSummary) -> None:
        raise NotImplementedError

    def get(self, upload_id: int) -> Optional[Upload]:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[Upload]:
        raise NotImplementedError

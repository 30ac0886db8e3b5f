from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive_ids(values, field_name: str) -> list[int]:
    try:
        ids = sorted({int(v) for v in values})
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a list of integers") from None
    if not ids or any(i <= 0 for i in ids):
        raise ValidationError(f"{field_name} must contain positive ids")
    return ids


def optional_datetime(value: Optional[str], field_name: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M"):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValidationError(f"{field_name} is not a valid datetime")

from __future__ import annotations

from datetime import date, datetime, time, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def whole_minutes(delta: timedelta) -> int:
    """Signed whole minutes, truncated toward negative infinity."""
    return int(delta.total_seconds() // 60)


def drop_seconds(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def weekday_name(day: date) -> str:
    return day.strftime("%A").lower()


def parse_clock(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into time."""
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid clock time: {value!r}")

from __future__ import annotations

import logging
import time as _time
from contextlib import contextmanager
from datetime import time, timedelta
from functools import wraps
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.constants import DEFAULT_MERGE_MAX_RETRIES
from ..core.exceptions import MergeConflictError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# ER_LOCK_DEADLOCK, ER_LOCK_WAIT_TIMEOUT
RETRYABLE_ERRNOS = frozenset({1213, 1205})


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def retry_on_conflict(*, attempts: Optional[int] = None, backoff_seconds: float = 0.05):
    """Re-run a storage call when MySQL reports a deadlock or lock wait timeout.

    The wrapped call must be safe to repeat (it runs in its own transaction).
    Without explicit attempts the repository's `max_retries` attribute is used.
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            total = attempts or int(getattr(args[0], "max_retries", DEFAULT_MERGE_MAX_RETRIES))
            for attempt in range(1, total + 1):
                try:
                    return fn(*args, **kwargs)
                except mysql.connector.Error as exc:
                    if exc.errno not in RETRYABLE_ERRNOS:
                        raise
                    if attempt == total:
                        raise MergeConflictError(
                            f"{fn.__name__} still conflicting after {total} attempts"
                        ) from exc
                    logger.warning("%s conflicted (errno %s), retry %d/%d", fn.__name__, exc.errno, attempt, total)
                    _time.sleep(backoff_seconds * attempt)

        return wrapper

    return decorator


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")

from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import PersistenceTimeoutError, PersistenceUnavailableError
from .connection import DatabaseConnection

# lock wait timeout, lost connection during query, max_execution_time exceeded
_TIMEOUT_ERRNOS = {1205, 2013, 3024}


def _is_unavailable(e: mysql.connector.Error) -> bool:
    if getattr(e, "errno", None) in _TIMEOUT_ERRNOS:
        return True
    return isinstance(e, (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError))


def translate_mysql_error(e: mysql.connector.Error) -> PersistenceUnavailableError:
    if getattr(e, "errno", None) in _TIMEOUT_ERRNOS:
        return PersistenceTimeoutError(f"database call timed out: {e}")
    return PersistenceUnavailableError(f"database unavailable: {e}")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error.

    Connection-level and timeout failures surface as
    ``PersistenceUnavailableError`` / ``PersistenceTimeoutError``. Other
    connector errors (integrity, programming) propagate unchanged.
    """

    try:
        conn = conn_factory.connect()
    except (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError) as e:
        raise translate_mysql_error(e) from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        if _is_unavailable(e):
            raise translate_mysql_error(e) from e
        raise
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


def seconds_or_none(value: Optional[timedelta]) -> Optional[int]:
    return int(value.total_seconds()) if value is not None else None


def duration_from_seconds(value: Any) -> timedelta:
    return timedelta(seconds=int(value or 0))


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

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .connection import DatabaseConnection


@contextmanager
def _shared_cursor(conn, dictionary: bool) -> Iterator[Tuple[Any, Any]]:
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
    finally:
        cur.close()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """Borrow a connection and cursor for one operation.

    Inside ``conn_factory.transaction()`` the pinned connection is reused and
    the enclosing transaction owns commit/rollback. Otherwise the borrowed
    connection is committed (or rolled back) and always returned to the pool.
    """

    shared = conn_factory.active_connection()
    if shared is not None:
        with _shared_cursor(shared, dictionary) as pair:
            yield pair
        return

    conn = conn_factory.connect()
    try:
        with _shared_cursor(conn, dictionary) as pair:
            yield pair
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def _time_from_text(value: str) -> time:
    parts = value.strip().split(":")
    if not 2 <= len(parts) <= 3:
        raise ValueError(f"Invalid time string: {value!r}")
    hh, mm, ss = (parts + ["0"])[:3]
    return time(int(hh), int(mm), int(ss or 0))


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns arrive as time, timedelta (the C extension) or text."""

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        # TIME can exceed a day; keep the time of day.
        return (datetime.min + timedelta(seconds=int(value.total_seconds()) % 86400)).time()
    if isinstance(value, str):
        return _time_from_text(value)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def normalize_mysql_date(value: Any) -> date:
    """DATE columns come back as date; some drivers/views hand back strings."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")

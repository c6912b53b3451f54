from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterable, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.constants import USER_NOT_FOUND
from ..core.exceptions import NotFoundError
from .connection import DatabaseConnection


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


@contextmanager
def db_transaction(conn_factory: DatabaseConnection, *, isolation_level: str = "READ COMMITTED"):
    """Explicit transaction for check-then-write sequences.

    Reads issued after `lock_users` see rows committed by writers that held the
    same locks before us.
    """

    conn = conn_factory.connect()
    try:
        conn.start_transaction(isolation_level=isolation_level)
        cur = conn.cursor(dictionary=True)
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


def lock_users(cur, user_ids: Iterable[str]) -> None:
    """Lock participant rows FOR UPDATE in a stable order to avoid deadlocks.

    Raises NotFoundError when any of the ids has no users row.
    """

    ids = sorted({str(u) for u in user_ids if u})
    if not ids:
        return
    placeholders = ",".join(["%s"] * len(ids))
    cur.execute(
        f"SELECT id FROM users WHERE id IN ({placeholders}) ORDER BY id FOR UPDATE",
        tuple(ids),
    )
    if len(fetchall(cur)) < len(ids):
        raise NotFoundError(USER_NOT_FOUND)


def is_duplicate_key(err: Exception) -> bool:
    return isinstance(err, mysql.connector.IntegrityError) and getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


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


def to_hhmm(value: Any) -> str:
    t = normalize_mysql_time(value)
    return t.strftime("%H:%M") if t else ""


def in_clause(values: Iterable[object]) -> tuple[str, tuple]:
    items = tuple(values)
    return ",".join(["%s"] * len(items)), items

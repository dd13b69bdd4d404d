from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StorageError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` and commit on success.

    Integrity errors are re-raised untouched so repositories can map
    duplicate keys to domain errors; any other connector error becomes
    ``StorageError``.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError:
        conn.rollback()
        raise
    except mysql.connector.Error as e:
        conn.rollback()
        logger.exception("Database operation failed")
        raise StorageError("Database operation failed") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def is_duplicate_key(err: mysql.connector.Error) -> bool:
    return getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def dump_embedding(values: Sequence[float]) -> str:
    # store embedding vector as JSON text for portability
    return json.dumps([float(v) for v in values])


def load_embedding(text: Optional[str]) -> tuple[float, ...]:
    if not text:
        return ()
    return tuple(float(v) for v in json.loads(text))


def as_time(value: Any) -> Optional[time]:
    """Coerce a TIME column to ``datetime.time``.

    The C extension hands back ``timedelta`` (seconds since midnight), the pure
    Python connector sometimes a ``'HH:MM[:SS]'`` string.
    """

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, seconds // 60 % 60, seconds % 60)
    if isinstance(value, str):
        hh, mm, ss = (int(p or 0) for p in (value.strip().split(":") + ["0", "0"])[:3])
        return time(hh, mm, ss)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")

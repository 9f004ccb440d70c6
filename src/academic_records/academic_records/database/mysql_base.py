from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
import structlog

from ..core.exceptions import InfrastructureError
from .connection import DatabaseConnection

logger = structlog.get_logger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True, isolation_level: Optional[str] = None):
    """Connection + cursor for one unit of work; commits on success.

    With ``isolation_level`` the block runs inside an explicit transaction at
    that level (e.g. ``"SERIALIZABLE"``). Driver errors surface as
    InfrastructureError; domain exceptions raised inside the block pass
    through after rollback.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        logger.error("db_connect_failed", error=str(e))
        raise InfrastructureError("Database unavailable") from e

    try:
        if isolation_level:
            conn.start_transaction(isolation_level=isolation_level)
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        logger.error("db_operation_failed", error=str(e), errno=getattr(e, "errno", None))
        raise InfrastructureError("Database operation failed") from e
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


def time_to_minutes(value: Any) -> int:
    """Normalize MySQL TIME values into minutes since midnight.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if isinstance(value, time):
        return value.hour * 60 + value.minute

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        return total_seconds // 60

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return int(parts[0]) * 60 + int(parts[1])

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def minutes_to_time(minutes: int) -> time:
    return time(hour=int(minutes) // 60, minute=int(minutes) % 60)

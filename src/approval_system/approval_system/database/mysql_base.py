from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_transaction(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a connection, start a transaction and yield ``(conn, cur)``.

    Commits when the block exits normally, rolls back and re-raises otherwise.
    """

    conn = conn_factory.connect()
    try:
        conn.start_transaction()
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

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode

from .connection import DatabaseConnection

# Error numbers the data access layer reacts to
ER_DUP_ENTRY = errorcode.ER_DUP_ENTRY
ER_NO_SUCH_TABLE = errorcode.ER_NO_SUCH_TABLE
ER_DATA_TOO_LONG = errorcode.ER_DATA_TOO_LONG
ER_BAD_DB_ERROR = errorcode.ER_BAD_DB_ERROR


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

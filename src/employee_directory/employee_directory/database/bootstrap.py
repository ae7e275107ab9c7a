from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..core.constants import EMPLOYEES_TABLE
from .connection import DatabaseConnection
from .mysql_base import ER_BAD_DB_ERROR, ER_NO_SUCH_TABLE

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Schema files must work regardless of the configured database name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Splits on ';' outside of quotes. Lines starting with '--' are dropped.
    buf: list[str] = []
    quote = None
    escape = False

    lines = [line for line in sql.splitlines() if not line.lstrip().startswith("--")]
    for ch in "\n".join(lines):
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue

        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql_file(conn_factory: DatabaseConnection, path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path) -> None:
    ensure_database_exists(conn_factory)
    _exec_sql_file(conn_factory, schema_path)


def apply_seed_sql(conn_factory: DatabaseConnection, *, seed_path: str | Path) -> None:
    _exec_sql_file(conn_factory, seed_path)


def table_exists(conn_factory: DatabaseConnection, table: str = EMPLOYEES_TABLE) -> bool:
    """Probe the table with a cheap select.

    Only "table does not exist" counts as missing; any other error (and an
    unknown database) propagates to the caller.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        try:
            cur.execute(f"SELECT id FROM `{table}` LIMIT 1")
            cur.fetchall()
        except mysql.connector.Error as e:
            if e.errno == ER_NO_SUCH_TABLE:
                return False
            raise
        return True
    finally:
        conn.close()


def initialize_database(conn_factory: DatabaseConnection, *, schema_path: str | Path) -> bool:
    """Create the employees table when it is missing.

    Returns True when the schema had to be applied.
    """

    try:
        if table_exists(conn_factory):
            return False
    except mysql.connector.Error as e:
        if e.errno != ER_BAD_DB_ERROR:
            raise

    logger.info("employees table missing on %s, applying %s", conn_factory.config.describe(), schema_path)
    try:
        apply_schema(conn_factory, schema_path=schema_path)
    except mysql.connector.Error:
        logger.exception("Error creating database schema")
        raise
    return True


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()

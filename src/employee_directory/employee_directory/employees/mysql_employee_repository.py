from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from datetime import datetime
from typing import Sequence

import mysql.connector

from ..core.constants import FIELD_LABELS
from ..core.exceptions import DataAccessError, DuplicateEmailError, FieldTooLongError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import ER_DATA_TOO_LONG, ER_DUP_ENTRY, db_cursor, fetchall, fetchone
from .model import Employee, EmployeeInput
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

_TOO_LONG_COLUMN = re.compile(r"column '(\w+)'")


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["id"]),
        name=row["name"],
        email=row["email"],
        company_name=row["company_name"],
        department=row["department"],
        position=row["position"],
        created_at=row.get("created_at"),
    )


@contextmanager
def _translate_errors():
    """Map driver errors onto domain exceptions."""
    try:
        yield
    except mysql.connector.Error as e:
        if e.errno == ER_DUP_ENTRY:
            raise DuplicateEmailError() from e
        if e.errno == ER_DATA_TOO_LONG:
            m = _TOO_LONG_COLUMN.search(e.msg or "")
            field = m.group(1) if m else ""
            label = FIELD_LABELS.get(field, "データ")
            raise FieldTooLongError(field, f"{label}が長すぎます") from e
        raise DataAccessError(f"database error: {e.msg}", errno=e.errno) from e


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Employee]:
        with _translate_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, email, company_name, department, position, created_at
                FROM employees
                ORDER BY created_at DESC, id DESC
                """
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def exists_by_email(self, email: str) -> bool:
        with _translate_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM employees WHERE email=%s LIMIT 1", (email,))
            return fetchone(cur) is not None

    def create(self, data: EmployeeInput, *, created_at: datetime) -> Employee:
        with _translate_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(name, email, company_name, department, position, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (data.name, data.email, data.company_name, data.department, data.position, created_at),
            )
            employee_id = int(cur.lastrowid)

        logger.debug("employee %s created (%s)", employee_id, data.email)
        return Employee(employee_id=employee_id, created_at=created_at, **data.as_dict())

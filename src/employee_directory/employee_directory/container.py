from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.constants import MAX_UPLOAD_BYTES
from .csv_io.exporter import CSVExportService
from .csv_io.importer import CSVImportService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository

    employee_service: EmployeeService
    csv_import_service: CSVImportService
    csv_export_service: CSVExportService


def build_container(
    *,
    db_config: Optional[dict] = None,
    employees_repo: Optional[EmployeeRepository] = None,
    max_upload_bytes: int = MAX_UPLOAD_BYTES,
) -> Container:
    """Wire repositories and services.

    Pass ``employees_repo`` to run against another store (tests use an
    in-memory one); otherwise ``db_config`` selects the MySQL database.
    """

    conn = None
    if employees_repo is None:
        if db_config is None:
            raise ValueError("db_config or employees_repo is required")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        employees_repo = MySQLEmployeeRepository(conn)

    employee_service = EmployeeService(employees_repo)
    csv_import_service = CSVImportService(employee_service, max_bytes=max_upload_bytes)
    csv_export_service = CSVExportService()

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        employee_service=employee_service,
        csv_import_service=csv_import_service,
        csv_export_service=csv_export_service,
    )

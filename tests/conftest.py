from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

import pytest

from src.employee_directory.employee_directory.container import build_container
from src.employee_directory.employee_directory.core.exceptions import DataAccessError, DuplicateEmailError
from src.employee_directory.employee_directory.employees.model import Employee, EmployeeInput


class InMemoryEmployees:
    """Stands in for the hosted table; email is unique case-insensitively."""

    def __init__(self, employees: Optional[list[Employee]] = None):
        self._rows: list[Employee] = list(employees or [])
        self._id = max((e.employee_id for e in self._rows), default=0)
        self.fail_list = False
        self.fail_exists = False
        self.fail_create_for: set[str] = set()

    @property
    def rows(self) -> list[Employee]:
        return list(self._rows)

    def seed(self, *employees: Employee) -> None:
        self._rows.extend(employees)
        self._id = max([self._id, *(e.employee_id for e in employees)])

    def clear(self) -> None:
        self._rows.clear()

    def list_all(self):
        if self.fail_list:
            raise DataAccessError("database error: connection refused", errno=2003)
        return sorted(self._rows, key=lambda e: (e.created_at, e.employee_id), reverse=True)

    def exists_by_email(self, email: str) -> bool:
        if self.fail_exists:
            raise DataAccessError("database error: connection refused", errno=2003)
        return any(e.email.lower() == email.lower() for e in self._rows)

    def create(self, data: EmployeeInput, *, created_at: datetime) -> Employee:
        if data.email in self.fail_create_for:
            raise DataAccessError("database error: lock wait timeout", errno=1205)
        if any(e.email.lower() == data.email.lower() for e in self._rows):
            raise DuplicateEmailError()
        self._id += 1
        employee = Employee(employee_id=self._id, created_at=created_at, **data.as_dict())
        self._rows.append(employee)
        return employee


def _make_employee(employee_id: int, name: str, email: str, *, company_name="株式会社サンプル",
                  department="営業部", position="部長", minutes_ago: int = 0) -> Employee:
    return Employee(
        employee_id=employee_id,
        name=name,
        email=email,
        company_name=company_name,
        department=department,
        position=position,
        created_at=datetime(2026, 1, 1, 9, 0) - timedelta(minutes=minutes_ago),
    )


@pytest.fixture
def make_employee():
    return _make_employee


@pytest.fixture
def repo():
    return InMemoryEmployees()


@pytest.fixture
def container(repo):
    return build_container(employees_repo=repo)


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.employee_directory.employee_directory.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import Employee, EmployeeInput


class EmployeeRepository(Protocol):
    """Repository interface for the employees table.

    Services depend on this protocol, not on a concrete database driver.
    """

    def list_all(self) -> Sequence[Employee]:
        """All employees, newest first."""
        raise NotImplementedError

    def exists_by_email(self, email: str) -> bool:
        raise NotImplementedError

    def create(self, data: EmployeeInput, *, created_at: datetime) -> Employee:
        """Insert one employee.

        Raises DuplicateEmailError when the email is already stored.
        """
        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: one row of the employees table.

    ``employee_id`` and ``created_at`` are assigned by the store.
    """

    employee_id: int
    name: str
    email: str
    company_name: str
    department: str
    position: str
    created_at: Optional[datetime] = None

    def searchable_values(self) -> tuple[str, ...]:
        return (self.name, self.email, self.department, self.company_name, self.position)


@dataclass(frozen=True)
class EmployeeInput:
    """The five user-supplied fields of an employee."""

    name: str
    email: str
    company_name: str
    department: str
    position: str

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "company_name": self.company_name,
            "department": self.department,
            "position": self.position,
        }

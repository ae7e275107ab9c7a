from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional, Sequence

from ..common.validators import exceeds_max_length, is_blank, is_valid_email
from ..core.constants import FIELD_LABELS, FIELD_MAX_LENGTHS
from ..core.exceptions import (
    DataAccessError,
    DuplicateEmailError,
    FieldTooLongError,
    InvalidEmailError,
    RequiredFieldError,
    ValidationError,
)
from .model import Employee, EmployeeInput
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

EMAIL_CHECK_FAILED = "メールアドレスの検証中にエラーが発生しました"

# Registration form limits. Email length is left to the store.
_FORM_MAX_LENGTHS = {f: n for f, n in FIELD_MAX_LENGTHS.items() if f != "email"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _too_long_message(field: str) -> str:
    return f"{FIELD_LABELS[field]}は{FIELD_MAX_LENGTHS[field]}文字以内で入力してください"


def filter_employees(employees: Iterable[Employee], term: Optional[str]) -> list[Employee]:
    """Case-insensitive substring search across the five text fields."""
    employees = list(employees)
    if not term:
        return employees

    needle = term.lower()
    return [e for e in employees if any(needle in (v or "").lower() for v in e.searchable_values())]


class EmployeeService:
    """Use cases: list, search and register employees."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def list_employees(self) -> Sequence[Employee]:
        return list(self._employees.list_all() or [])

    def search(self, term: Optional[str]) -> tuple[list[Employee], int]:
        """Return (filtered employees, total count)."""
        employees = self.list_employees()
        return filter_employees(employees, term), len(employees)

    def email_exists(self, email: str) -> bool:
        return self._employees.exists_by_email(email)

    def validate_registration(self, form: Mapping[str, str]) -> EmployeeInput:
        """Validate the registration form.

        Every field is checked so the form can show all messages at once.
        """

        values = {f: str(form.get(f) or "") for f in FIELD_LABELS}
        errors: dict[str, str] = {}

        for field, label in FIELD_LABELS.items():
            value = values[field]
            if is_blank(value):
                errors[field] = f"{label}は必須です"
            elif field in _FORM_MAX_LENGTHS and exceeds_max_length(value, _FORM_MAX_LENGTHS[field]):
                errors[field] = _too_long_message(field)

        if "email" not in errors and not is_valid_email(values["email"].strip()):
            errors["email"] = "有効なメールアドレスを入力してください"

        if errors:
            raise ValidationError("入力内容に誤りがあります", errors)

        return EmployeeInput(**{f: v.strip() for f, v in values.items()})

    def check_email_available(self, email: str) -> None:
        try:
            exists = self.email_exists(email)
        except DataAccessError as e:
            logger.exception("email check failed for %s", email)
            raise ValidationError(EMAIL_CHECK_FAILED, {"email": EMAIL_CHECK_FAILED}) from e
        if exists:
            raise DuplicateEmailError()

    def register_employee(self, form: Mapping[str, str]) -> Employee:
        data = self.validate_registration(form)
        # Final uniqueness check before submitting
        self.check_email_available(data.email)
        return self.create_employee(data)

    def create_employee(self, data: EmployeeInput, *, now: Optional[datetime] = None) -> Employee:
        for field, label in FIELD_LABELS.items():
            if is_blank(getattr(data, field)):
                raise RequiredFieldError(field, f"{label}は必須です")
        if not is_valid_email(data.email):
            raise InvalidEmailError()
        for field, max_len in FIELD_MAX_LENGTHS.items():
            if exceeds_max_length(getattr(data, field), max_len):
                raise FieldTooLongError(field, _too_long_message(field))

        if self._employees.exists_by_email(data.email):
            raise DuplicateEmailError()

        employee = self._employees.create(data, created_at=now or _utcnow())
        logger.info("registered employee %s <%s>", employee.employee_id, employee.email)
        return employee

from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid.

    ``field_errors`` maps a form field to the message shown next to it.
    """

    def __init__(self, message: str, field_errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.field_errors = dict(field_errors or {})


class DuplicateEmailError(ValidationError):
    """Raised when the email is already registered."""

    def __init__(self, message: str = "このメールアドレスは既に登録されています"):
        super().__init__(message, {"email": message})


class RequiredFieldError(ValidationError):
    def __init__(self, field: str, message: str):
        super().__init__(message, {field: message})
        self.field = field


class FieldTooLongError(ValidationError):
    def __init__(self, field: str, message: str):
        super().__init__(message, {field: message})
        self.field = field


class InvalidEmailError(ValidationError):
    def __init__(self, message: str = "有効なメールアドレスを入力してください"):
        super().__init__(message, {"email": message})


class CSVFormatError(DomainError):
    """Raised when an uploaded file cannot be read as CSV."""


class DataAccessError(DomainError):
    """Raised when the hosted database rejects or fails an operation."""

    def __init__(self, message: str, errno: Optional[int] = None):
        super().__init__(message)
        self.errno = errno

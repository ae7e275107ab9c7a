from __future__ import annotations

from ..core.constants import EMAIL_PATTERN


def is_blank(value) -> bool:
    return value is None or not str(value).strip()


def exceeds_max_length(value: str, max_len: int) -> bool:
    return value is not None and len(value) > max_len


def is_valid_email(value: str) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None

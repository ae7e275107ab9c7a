from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from ..common.validators import is_blank, is_valid_email
from ..core.constants import CSV_HEADERS, FIELD_LABELS, MAX_UPLOAD_BYTES
from ..core.exceptions import (
    CSVFormatError,
    DataAccessError,
    DuplicateEmailError,
    FieldTooLongError,
    InvalidEmailError,
    RequiredFieldError,
)
from ..employees.model import EmployeeInput
from ..employees.service import EmployeeService

logger = logging.getLogger(__name__)

ENCODING_ERROR = "ファイルの文字コードが不正です。UTF-8で保存し直してください"
FORMAT_ERROR = "CSVファイルの形式が不正です。UTF-8エンコーディングで保存されているか確認してください"
SIZE_ERROR = "ファイルサイズは5MB以下にしてください"
NO_FILE_ERROR = "ファイルをアップロードしてください"
NOT_CSV_ERROR = "CSVファイルのみアップロード可能です"
EMPTY_FILE_ERROR = "インポートできる従業員データがありません"


@dataclass(frozen=True)
class CSVValidationResult:
    valid: bool
    errors: list[str]
    records: list[EmployeeInput] = field(default_factory=list)


@dataclass(frozen=True)
class ImportResult:
    success_count: int
    errors: list[str]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


def import_error_message(error: Exception, employee_name: str) -> str:
    """Turn a failed create into the message shown for that CSV row."""

    if isinstance(error, DuplicateEmailError):
        return f"{employee_name}のメールアドレスは既に登録されています"
    if isinstance(error, InvalidEmailError):
        return f"{employee_name}のメールアドレスの形式が正しくありません"
    if isinstance(error, RequiredFieldError):
        label = FIELD_LABELS.get(error.field, "必須項目")
        return f"{employee_name}の{label}が入力されていません"
    if isinstance(error, FieldTooLongError):
        label = FIELD_LABELS.get(error.field, "データ")
        return f"{employee_name}の{label}が長すぎます"
    if isinstance(error, DataAccessError):
        return f"{employee_name}の登録中にデータベースエラーが発生しました"
    return f"{employee_name}の登録に失敗しました: システムエラーが発生しました"


def decode_csv(content: Union[bytes, str]) -> str:
    if isinstance(content, str):
        return content[1:] if content.startswith("\ufeff") else content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CSVFormatError(ENCODING_ERROR) from e


def validate_csv_data(content: Union[bytes, str]) -> CSVValidationResult:
    """Parse CSV text and validate headers, required fields and email format.

    Row numbers in messages count the header as line 1. Blank lines are
    skipped but still counted.
    """

    text = decode_csv(content)
    try:
        rows = list(csv.reader(io.StringIO(text, newline="")))
    except csv.Error as e:
        raise CSVFormatError(FORMAT_ERROR) from e

    errors: list[str] = []
    headers = [h.strip() for h in rows[0]] if rows else []

    missing = [h for h in CSV_HEADERS if h not in headers]
    if missing:
        errors.append(f"必須列が不足しています: {', '.join(missing)}")

    index = {h: i for i, h in enumerate(headers) if h in CSV_HEADERS}
    records: list[EmployeeInput] = []

    for row_num, cells in enumerate(rows[1:], start=2):
        if all(is_blank(c) for c in cells):
            continue

        row = {h: (cells[i] if i < len(cells) else "") for h, i in index.items()}
        row_errors = [f"{row_num}行目: {h}は必須です" for h in CSV_HEADERS if is_blank(row.get(h))]

        email = (row.get("メールアドレス") or "").strip()
        if email and not is_valid_email(email):
            row_errors.append(f"{row_num}行目: メールアドレスの形式が不正です")

        if row_errors:
            errors.extend(row_errors)
            continue

        records.append(EmployeeInput(**{CSV_HEADERS[h]: row[h].strip() for h in CSV_HEADERS}))

    return CSVValidationResult(valid=not errors and bool(records), errors=errors, records=records)


def is_csv_upload(filename: Optional[str], content_type: Optional[str]) -> bool:
    mimetype = (content_type or "").split(";")[0].strip().lower()
    return mimetype == "text/csv" or (filename or "").lower().endswith(".csv")


class CSVImportService:
    """Use case: bulk-register employees from an uploaded CSV file.

    Each valid row is submitted on its own; failures are collected per row
    and never stop the remaining rows.
    """

    def __init__(self, employees: EmployeeService, *, max_bytes: int = MAX_UPLOAD_BYTES):
        self._employees = employees
        self._max_bytes = int(max_bytes)

    def check_upload(self, *, filename: Optional[str], content_type: Optional[str], size: int) -> Optional[str]:
        """Return the rejection message for an unacceptable upload, else None."""
        if not filename:
            return NO_FILE_ERROR
        if not is_csv_upload(filename, content_type):
            return NOT_CSV_ERROR
        if size > self._max_bytes:
            return SIZE_ERROR
        return None

    def import_file(
        self,
        *,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> ImportResult:
        rejection = self.check_upload(filename=filename, content_type=content_type, size=len(content or b""))
        if rejection:
            return ImportResult(success_count=0, errors=[rejection])

        try:
            result = validate_csv_data(content)
        except CSVFormatError as e:
            logger.warning("unreadable CSV upload %s: %s", filename, e)
            return ImportResult(success_count=0, errors=[str(e)])

        if not result.valid:
            logger.info("CSV %s rejected with %d validation errors", filename, len(result.errors))
            # Header-only files fail without row errors
            return ImportResult(success_count=0, errors=list(result.errors) or [EMPTY_FILE_ERROR])

        return self.import_records(result.records, source=filename)

    def import_records(self, records: list[EmployeeInput], *, source: Optional[str] = None) -> ImportResult:
        imported = 0
        errors: list[str] = []
        seen_emails: set[str] = set()

        for record in records:
            key = record.email.lower()
            if key in seen_emails:
                errors.append(f"{record.name}のメールアドレスがCSVファイル内で重複しています")
                continue
            seen_emails.add(key)

            try:
                self._employees.create_employee(record)
                imported += 1
            except (DuplicateEmailError, InvalidEmailError, RequiredFieldError, FieldTooLongError) as e:
                errors.append(import_error_message(e, record.name))
            except DataAccessError as e:
                logger.error("database error importing %s: %s", record.email, e)
                errors.append(import_error_message(e, record.name))
            except Exception as e:
                logger.exception("unexpected error importing %s", record.email)
                errors.append(import_error_message(e, record.name))

        logger.info("CSV import %s: %d imported, %d failed", source or "-", imported, len(errors))
        return ImportResult(success_count=imported, errors=errors)

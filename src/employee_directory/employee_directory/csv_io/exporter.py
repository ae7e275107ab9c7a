from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, Optional

import pandas as pd

from ..core.constants import (
    CSV_HEADERS,
    CSV_TEMPLATE_SAMPLE_ROW,
    EXPORT_FILENAME_PREFIX,
)
from ..employees.model import Employee


def _employee_row(employee: Employee) -> list[str]:
    return [getattr(employee, field) or "" for field in CSV_HEADERS.values()]


def _write_csv(rows: Iterable[Iterable[str]], *, quoting: int) -> str:
    out = io.StringIO()
    # Header line stays unquoted whatever the data quoting is
    csv.writer(out, lineterminator="\n").writerow(list(CSV_HEADERS))
    csv.writer(out, quoting=quoting, lineterminator="\n").writerows(rows)
    # Keep the file free of a trailing blank line
    return out.getvalue().rstrip("\n")


def build_employees_csv(employees: Iterable[Employee]) -> str:
    """Serialize employees with the import header order, every field quoted."""
    return _write_csv((_employee_row(e) for e in employees), quoting=csv.QUOTE_ALL)


def build_template_csv() -> str:
    return _write_csv([CSV_TEMPLATE_SAMPLE_ROW], quoting=csv.QUOTE_MINIMAL)


def export_filename(today: Optional[date] = None, *, extension: str = "csv") -> str:
    today = today or date.today()
    return f"{EXPORT_FILENAME_PREFIX}_{today.strftime('%Y%m%d')}.{extension}"


class CSVExportService:
    """Use case: export the (filtered) employee list."""

    def to_csv_bytes(self, employees: Iterable[Employee]) -> bytes:
        return build_employees_csv(employees).encode("utf-8-sig")

    def template_bytes(self) -> bytes:
        return build_template_csv().encode("utf-8-sig")

    def to_xlsx(self, employees: Iterable[Employee]) -> io.BytesIO:
        df = pd.DataFrame([_employee_row(e) for e in employees], columns=list(CSV_HEADERS))

        # Written in memory, never to disk
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="従業員一覧")
        output.seek(0)
        return output

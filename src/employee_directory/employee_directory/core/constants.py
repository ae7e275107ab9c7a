"""Constants and defaults.

Note: Keep constants here to avoid magic numbers and labels spread across code.
"""

import re

EMPLOYEES_TABLE = "employees"

# Form field -> Japanese label, in the CSV column order.
FIELD_LABELS = {
    "company_name": "会社名",
    "name": "氏名",
    "email": "メールアドレス",
    "department": "部署",
    "position": "役職",
}

# CSV header -> form field
CSV_HEADERS = {label: field for field, label in FIELD_LABELS.items()}

FIELD_MAX_LENGTHS = {
    "company_name": 100,
    "name": 50,
    "email": 255,
    "department": 50,
    "position": 50,
}

EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

CSV_TEMPLATE_SAMPLE_ROW = ("株式会社サンプル", "山田太郎", "yamada@example.com", "営業部", "部長")
CSV_TEMPLATE_FILENAME = "従業員登録テンプレート.csv"
EXPORT_FILENAME_PREFIX = "従業員一覧"

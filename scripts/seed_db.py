from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.employee_directory.employee_directory.database.bootstrap import apply_seed_sql, initialize_database
from src.employee_directory.employee_directory.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(settings.DB_CONFIG))

    initialize_database(conn, schema_path=REPO_ROOT / "database" / "schema.sql")
    apply_seed_sql(conn, seed_path=REPO_ROOT / "database" / "seed.sql")
    print(f"OK: Seeded sample employees -> {conn.config.describe()}")


if __name__ == "__main__":
    main()

"""Example: use the service layer without Flask.

Imports a CSV file from the command line and prints the per-row result.
"""

import importlib
import sys
from pathlib import Path

from config import get_settings_module

from src.employee_directory.employee_directory.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    path = Path(sys.argv[1])
    result = container.csv_import_service.import_file(filename=path.name, content=path.read_bytes())
    print(f"imported={result.success_count}")
    for message in result.errors:
        print(f"  {message}")


if __name__ == "__main__":
    main()

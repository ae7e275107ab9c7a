from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, flash, jsonify, redirect, request, url_for
from werkzeug.exceptions import RequestEntityTooLarge

from config import get_settings_module

from .container import Container, build_container
from .core.constants import MAX_UPLOAD_BYTES
from .csv_io.controller import register as register_csv_io
from .csv_io.importer import SIZE_ERROR
from .database.bootstrap import apply_seed_sql, initialize_database, list_tables
from .employees.controller import register as register_employees

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder=str(REPO_ROOT / "templates"))

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    max_upload_bytes = int(getattr(settings, "MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES))
    app.config["MAX_UPLOAD_BYTES"] = max_upload_bytes
    # Room for the multipart envelope around a file at the size limit
    app.config["MAX_CONTENT_LENGTH"] = max_upload_bytes + 1024 * 1024

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        container = build_container(db_config=db_config, max_upload_bytes=max_upload_bytes)
        logger.info("settings=%s db=%s", settings_module, container.conn.config.describe())

        if getattr(settings, "AUTO_INIT_DB", False):
            created = initialize_database(container.conn, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema %s (tables=%d)", "created" if created else "ready", len(list_tables(container.conn)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(container.conn, seed_path=REPO_ROOT / "database" / "seed.sql")
            logger.info("sample employees loaded")

    app.extensions["employee_directory"] = container

    register_employees(app, container)
    register_csv_io(app, container)

    @app.errorhandler(RequestEntityTooLarge)
    def upload_too_large(_e):
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "imported": 0, "errors": [SIZE_ERROR]}), 413
        flash(SIZE_ERROR, "danger")
        return redirect(url_for("import_employees"))

    return app

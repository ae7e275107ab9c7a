from __future__ import annotations

import io
import logging

from flask import Flask, flash, jsonify, redirect, render_template, request, send_file, url_for

from ..container import Container
from ..core.constants import CSV_TEMPLATE_FILENAME
from .exporter import export_filename
from .importer import NO_FILE_ERROR, ImportResult

logger = logging.getLogger(__name__)

CSV_MIMETYPE = "text/csv; charset=utf-8"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def register(app: Flask, container: Container) -> None:
    def _run_import() -> ImportResult:
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            return ImportResult(success_count=0, errors=[NO_FILE_ERROR])

        return container.csv_import_service.import_file(
            filename=upload.filename,
            content=upload.read(),
            content_type=upload.mimetype,
        )

    def _filtered_employees():
        filtered, _ = container.employee_service.search(request.args.get("q", ""))
        return filtered

    @app.route("/employees/import", methods=["GET", "POST"], endpoint="import_employees")
    def import_employees():
        result = None
        if request.method == "POST":
            result = _run_import()
            if not result.has_errors:
                flash(f"{result.success_count}件の従業員を登録しました", "success")
                return redirect(url_for("employees"))

        return render_template("employees/import.html", result=result, active_page="import_employees")

    @app.route("/api/employees/import", methods=["POST"], endpoint="api_import_employees")
    def api_import_employees():
        result = _run_import()
        status = 200 if result.success_count > 0 or not result.has_errors else 400
        return jsonify(
            {
                "success": not result.has_errors,
                "imported": result.success_count,
                "errors": result.errors,
            }
        ), status

    @app.route("/employees/import/template.csv", methods=["GET"], endpoint="download_template")
    def download_template():
        return send_file(
            io.BytesIO(container.csv_export_service.template_bytes()),
            mimetype=CSV_MIMETYPE,
            as_attachment=True,
            download_name=CSV_TEMPLATE_FILENAME,
        )

    @app.route("/employees/export.csv", methods=["GET"], endpoint="export_csv")
    def export_csv():
        try:
            employees = _filtered_employees()
        except Exception:
            logger.exception("CSV export failed")
            flash("CSVエクスポートに失敗しました", "danger")
            return redirect(url_for("employees"))

        return send_file(
            io.BytesIO(container.csv_export_service.to_csv_bytes(employees)),
            mimetype=CSV_MIMETYPE,
            as_attachment=True,
            download_name=export_filename(),
        )

    @app.route("/employees/export.xlsx", methods=["GET"], endpoint="export_xlsx")
    def export_xlsx():
        try:
            employees = _filtered_employees()
        except Exception:
            logger.exception("Excel export failed")
            flash("Excelエクスポートに失敗しました", "danger")
            return redirect(url_for("employees"))

        return send_file(
            container.csv_export_service.to_xlsx(employees),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=export_filename(extension="xlsx"),
        )

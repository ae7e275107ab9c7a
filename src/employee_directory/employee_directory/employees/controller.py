from __future__ import annotations

import logging

from flask import Flask, flash, jsonify, redirect, render_template, request, url_for

from ..container import Container
from ..core.constants import FIELD_LABELS
from ..core.exceptions import DataAccessError, ValidationError
from .service import EMAIL_CHECK_FAILED

logger = logging.getLogger(__name__)

FETCH_ERROR = "従業員データの取得に失敗しました。後でもう一度お試しください。"
REGISTER_ERROR = "従業員の登録に失敗しました。もう一度お試しください。"


def register(app: Flask, container: Container) -> None:
    @app.route("/", endpoint="index")
    def index():
        return redirect(url_for("employees"))

    @app.route("/employees", endpoint="employees")
    def employees():
        q = request.args.get("q", "")
        try:
            filtered, total = container.employee_service.search(q)
        except Exception:
            logger.exception("failed to fetch employees")
            return render_template("employees/list.html", error=FETCH_ERROR, q=q, active_page="employees")

        return render_template(
            "employees/list.html",
            employees=filtered,
            total_count=total,
            filtered_count=len(filtered),
            showing_filtered_count=bool(q) and len(filtered) != total,
            q=q,
            error=None,
            active_page="employees",
        )

    @app.route("/register-employee", methods=["GET", "POST"], endpoint="register_employee")
    def register_employee():
        values = {f: "" for f in FIELD_LABELS}
        field_errors: dict[str, str] = {}
        submit_error = None

        if request.method == "POST":
            values = {f: request.form.get(f, "") for f in FIELD_LABELS}
            try:
                employee = container.employee_service.register_employee(values)
                flash(f"{employee.name}を登録しました", "success")
                return redirect(url_for("employees"))
            except ValidationError as e:
                field_errors = e.field_errors
                if not field_errors:
                    submit_error = str(e)
            except Exception:
                logger.exception("employee registration failed")
                submit_error = REGISTER_ERROR

        return render_template(
            "employees/register.html",
            values=values,
            field_errors=field_errors,
            submit_error=submit_error,
            labels=FIELD_LABELS,
            active_page="register_employee",
        )

    @app.route("/api/employees/email-exists", methods=["GET"], endpoint="api_email_exists")
    def api_email_exists():
        """As-you-type uniqueness check used by the registration form."""
        email = request.args.get("email", "").strip()
        if not email:
            return jsonify({"success": False, "message": "メールアドレスは必須です"}), 400

        try:
            exists = container.employee_service.email_exists(email)
        except DataAccessError:
            logger.exception("email check failed for %s", email)
            return jsonify({"success": False, "message": EMAIL_CHECK_FAILED}), 500

        return jsonify({"success": True, "exists": exists})

from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, send_file, url_for

from ..common.datetime_utils import now_local
from ..common.web import current_actor, login_required
from ..container import Container
from ..core.exceptions import DomainError
from .currency import SUPPORTED_CURRENCIES


def register(app: Flask, container: Container) -> None:
    def _report_from_args():
        actor = current_actor()
        today = now_local().date()
        user_id = request.args.get("user_id", type=int) or actor.user_id
        return container.report_service.build(
            actor=actor,
            user_id=user_id,
            year=request.args.get("year", type=int) or today.year,
            month=request.args.get("month", type=int) or today.month,
            currency=request.args.get("currency", "PLN"),
        )

    @app.route("/reports/monthly", endpoint="monthly_report")
    @login_required
    def monthly_report():
        actor = current_actor()
        try:
            report = _report_from_args()
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("dashboard"))

        users = container.user_service.list_users(actor=actor) if actor.role.can_review else []
        return render_template(
            "reports/monthly.html",
            report=report,
            users=users,
            currencies=SUPPORTED_CURRENCIES,
            active_page="monthly_report",
        )

    @app.route("/reports/monthly/export", endpoint="export_monthly_report")
    @login_required
    def export_monthly_report():
        try:
            report = _report_from_args()
            output = container.report_service.to_excel(report)
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("monthly_report"))
        except Exception:
            app.logger.exception("Excel export failed")
            flash("System error while exporting the report", "danger")
            return redirect(url_for("monthly_report"))

        filename = f"timesheet_{report.user_id}_{report.year}-{report.month:02d}.xlsx"
        return send_file(
            output,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            as_attachment=True,
            download_name=filename,
        )

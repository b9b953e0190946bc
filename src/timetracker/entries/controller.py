from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import now_local, parse_iso_date, parse_optional_int, parse_time, shift_month
from ..common.validators import parse_decimal
from ..common.web import current_actor, login_required, role_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError
from .model import EntryChanges, EntryDraft


def _selected_month():
    today = now_local().date()
    year = request.args.get("year", type=int) or today.year
    month = request.args.get("month", type=int) or today.month
    if not 1 <= month <= 12:
        month = today.month
    return year, month


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard", endpoint="dashboard")
    @login_required
    def dashboard():
        actor = current_actor()
        year, month = _selected_month()
        user_id = request.args.get("user_id", type=int) if actor.role.can_review else None
        user_id = user_id or actor.user_id

        try:
            view = container.month_view_service.month_for(actor=actor, user_id=user_id, year=year, month=month)
            entries = container.entry_service.list_month(actor=actor, user_id=user_id, year=year, month=month)
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("dashboard"))

        users = container.user_service.list_users(actor=actor) if actor.role.can_review else []
        projects = container.project_service.list_projects(active_only=True)
        tasks = {p.project_id: container.project_service.list_tasks(p.project_id) for p in projects}

        return render_template(
            "dashboard.html",
            view=view,
            entries=entries,
            users=users,
            projects=projects,
            tasks=tasks,
            selected_user_id=user_id,
            prev_month=shift_month(year, month, -1),
            next_month=shift_month(year, month, 1),
            active_page="dashboard",
        )

    @app.route("/entries", methods=["POST"], endpoint="create_entry")
    @login_required
    def create_entry():
        actor = current_actor()
        form = request.form
        try:
            draft = EntryDraft(
                project_id=parse_optional_int(form.get("project_id"), "Project") or 0,
                task_id=parse_optional_int(form.get("task_id"), "Task"),
                work_date=parse_iso_date(form.get("work_date", "")),
                hours=parse_decimal(form.get("hours"), "Hours"),
                quantity=parse_decimal(form.get("quantity"), "Quantity"),
                hours_from=parse_time(form.get("hours_from")),
                hours_to=parse_time(form.get("hours_to")),
                description=form.get("description"),
                user_id=parse_optional_int(form.get("user_id"), "User"),
            )
            container.entry_service.create_entry(actor=actor, draft=draft)
            flash("Entry saved.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Creating entry failed for %s", actor.username)
            flash("System error while saving the entry", "danger")

        return redirect(url_for("dashboard", **_return_args(form)))

    @app.route("/entries/<int:entry_id>/edit", methods=["GET", "POST"], endpoint="edit_entry")
    @login_required
    def edit_entry(entry_id: int):
        actor = current_actor()
        try:
            entry = container.entry_service.get_entry(entry_id)
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("dashboard"))

        if request.method == "POST":
            form = request.form
            try:
                changes = EntryChanges(
                    work_date=parse_iso_date(form["work_date"]) if form.get("work_date") else None,
                    hours=parse_decimal(form.get("hours"), "Hours"),
                    quantity=parse_decimal(form.get("quantity"), "Quantity"),
                    hours_from=parse_time(form.get("hours_from")),
                    hours_to=parse_time(form.get("hours_to")),
                    description=form.get("description"),
                )
                entry = container.entry_service.update_entry(actor=actor, entry_id=entry_id, changes=changes)
                flash("Entry updated.", "success")
                return redirect(
                    url_for("dashboard", year=entry.work_date.year, month=entry.work_date.month, user_id=entry.user_id)
                )
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Updating entry %s failed", entry_id)
                flash("System error while updating the entry", "danger")

        return render_template("entries/edit.html", entry=entry, active_page="dashboard")

    @app.route("/entries/<int:entry_id>/delete", methods=["POST"], endpoint="delete_entry")
    @login_required
    def delete_entry(entry_id: int):
        try:
            container.entry_service.delete_entry(actor=current_actor(), entry_id=entry_id)
            flash("Entry deleted.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting entry %s failed", entry_id)
            flash("System error while deleting the entry", "danger")
        return redirect(url_for("dashboard", **_return_args(request.form)))

    @app.route("/entries/review", endpoint="review_entries")
    @role_required(Role.MANAGER, Role.DIRECTOR)
    def review_entries():
        pending = container.entry_service.list_pending(actor=current_actor())
        return render_template("entries/review.html", entries=pending, active_page="review_entries")

    @app.route("/entries/<int:entry_id>/approve", methods=["POST"], endpoint="approve_entry")
    @role_required(Role.MANAGER, Role.DIRECTOR)
    def approve_entry(entry_id: int):
        try:
            container.entry_service.approve_entry(actor=current_actor(), entry_id=entry_id)
            flash("Entry approved.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Approving entry %s failed", entry_id)
            flash("System error while approving the entry", "danger")
        return redirect(url_for("review_entries"))

    @app.route("/entries/<int:entry_id>/reject", methods=["POST"], endpoint="reject_entry")
    @role_required(Role.MANAGER, Role.DIRECTOR)
    def reject_entry(entry_id: int):
        try:
            container.entry_service.reject_entry(actor=current_actor(), entry_id=entry_id)
            flash("Entry rejected.", "warning")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Rejecting entry %s failed", entry_id)
            flash("System error while rejecting the entry", "danger")
        return redirect(url_for("review_entries"))


def _return_args(form) -> dict:
    """Keep the calendar on the month (and user) the form was posted from."""
    args = {}
    for key in ("year", "month", "user_id"):
        value = form.get(key)
        if value:
            args[key] = value
    return args

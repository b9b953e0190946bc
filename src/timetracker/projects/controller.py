from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import parse_optional_int
from ..common.validators import parse_decimal, parse_enum
from ..common.web import current_actor, login_required, role_required
from ..container import Container
from ..core.enums import BillingType, Role
from ..core.exceptions import DomainError
from .model import Project
from .service import TaskDraft


def _project_from_form(form, project_id: int = 0) -> Project:
    return Project(
        project_id=project_id,
        name=form.get("name", ""),
        number=form.get("number", ""),
        description=form.get("description"),
        manager_id=parse_optional_int(form.get("manager_id"), "Manager"),
        is_active=bool(form.get("is_active")),
    )


def _members_from_form(form) -> list[int]:
    return [int(uid) for uid in form.getlist("member_ids") if str(uid).isdigit()]


def _task_draft_from_form(form) -> TaskDraft:
    return TaskDraft(
        title=form.get("title", ""),
        number=form.get("number", ""),
        description=form.get("description"),
        billing_type=parse_enum(BillingType, (form.get("billing_type") or "").upper(), "Billing type", default=BillingType.HOURLY),
        unit_price=parse_decimal(form.get("unit_price"), "Unit price"),
        unit_name=form.get("unit_name"),
        is_active=bool(form.get("is_active")),
    )


def register(app: Flask, container: Container) -> None:
    editors = (Role.MANAGER, Role.DIRECTOR)

    def _users():
        return container.user_service.list_users(actor=current_actor())

    @app.route("/projects", endpoint="projects")
    @login_required
    def projects():
        items = container.project_service.list_projects()
        tasks = {p.project_id: container.project_service.list_tasks(p.project_id) for p in items}
        return render_template("projects/index.html", projects=items, tasks=tasks, active_page="projects")

    @app.route("/projects/new", methods=["GET", "POST"], endpoint="new_project")
    @role_required(*editors)
    def new_project():
        if request.method == "POST":
            try:
                container.project_service.create_project(
                    actor=current_actor(),
                    project=_project_from_form(request.form),
                    member_ids=_members_from_form(request.form),
                )
                flash("Project created.", "success")
                return redirect(url_for("projects"))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Creating project failed")
                flash("System error while creating the project", "danger")

        return render_template(
            "projects/form.html", project=None, member_ids=[], users=_users(), active_page="projects"
        )

    @app.route("/projects/<int:project_id>/edit", methods=["GET", "POST"], endpoint="edit_project")
    @role_required(*editors)
    def edit_project(project_id: int):
        try:
            details = container.project_service.get_details(project_id)
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("projects"))

        if request.method == "POST":
            try:
                container.project_service.update_project(
                    actor=current_actor(),
                    project=_project_from_form(request.form, project_id),
                    member_ids=_members_from_form(request.form),
                )
                flash("Project updated.", "success")
                return redirect(url_for("edit_project", project_id=project_id))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Updating project %s failed", project_id)
                flash("System error while updating the project", "danger")

        return render_template(
            "projects/form.html",
            project=details.project,
            tasks=details.tasks,
            member_ids=details.member_ids,
            users=_users(),
            active_page="projects",
        )

    @app.route("/projects/<int:project_id>/delete", methods=["POST"], endpoint="delete_project")
    @role_required(*editors)
    def delete_project(project_id: int):
        try:
            container.project_service.delete_project(actor=current_actor(), project_id=project_id)
            flash("Project deleted.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting project %s failed", project_id)
            flash("System error while deleting the project", "danger")
        return redirect(url_for("projects"))

    @app.route("/projects/<int:project_id>/tasks/new", methods=["GET", "POST"], endpoint="new_task")
    @role_required(*editors)
    def new_task(project_id: int):
        try:
            project = container.project_service.get_project(project_id)
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("projects"))

        if request.method == "POST":
            try:
                container.project_service.create_task(
                    actor=current_actor(), project_id=project_id, draft=_task_draft_from_form(request.form)
                )
                flash("Task created.", "success")
                return redirect(url_for("edit_project", project_id=project_id))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Creating task in project %s failed", project_id)
                flash("System error while creating the task", "danger")

        return render_template("projects/task_form.html", project=project, task=None, active_page="projects")

    @app.route("/tasks/<int:task_id>/edit", methods=["GET", "POST"], endpoint="edit_task")
    @role_required(*editors)
    def edit_task(task_id: int):
        try:
            task = container.project_service.get_task(task_id)
            project = container.project_service.get_project(task.project_id)
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("projects"))

        if request.method == "POST":
            try:
                container.project_service.update_task(
                    actor=current_actor(), task_id=task_id, draft=_task_draft_from_form(request.form)
                )
                flash("Task updated.", "success")
                return redirect(url_for("edit_project", project_id=project.project_id))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Updating task %s failed", task_id)
                flash("System error while updating the task", "danger")

        return render_template("projects/task_form.html", project=project, task=task, active_page="projects")

    @app.route("/tasks/<int:task_id>/delete", methods=["POST"], endpoint="delete_task")
    @role_required(*editors)
    def delete_task(task_id: int):
        project_id = None
        try:
            project_id = container.project_service.get_task(task_id).project_id
            container.project_service.delete_task(actor=current_actor(), task_id=task_id)
            flash("Task deleted.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting task %s failed", task_id)
            flash("System error while deleting the task", "danger")

        if project_id is None:
            return redirect(url_for("projects"))
        return redirect(url_for("edit_project", project_id=project_id))

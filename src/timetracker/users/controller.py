from __future__ import annotations

from datetime import timedelta

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.validators import parse_decimal, parse_enum
from ..common.web import current_actor, login_required, remember_actor, role_required
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import ContractType, Language, Role
from ..core.exceptions import AuthenticationError, DomainError
from .model import UserChanges


def _user_form_changes(form) -> UserChanges:
    return UserChanges(
        email=form.get("email"),
        first_name=form.get("first_name"),
        last_name=form.get("last_name"),
        role=parse_enum(Role, (form.get("role") or "").lower(), "Role"),
        contract_type=parse_enum(ContractType, (form.get("contract_type") or "").upper(), "Contract type"),
        language=parse_enum(Language, (form.get("language") or "").upper(), "Language"),
        uop_gross_rate=parse_decimal(form.get("uop_gross_rate"), "UoP gross rate"),
        b2b_hourly_net_rate=parse_decimal(form.get("b2b_hourly_net_rate"), "B2B hourly rate"),
    )


def register(app: Flask, container: Container) -> None:
    @app.context_processor
    def inject_current_user():
        return {"current_user": current_actor()}

    @app.route("/", methods=["GET", "POST"], endpoint="login")
    def login():
        if current_actor() is not None:
            return redirect(url_for("dashboard"))

        if request.method == "POST":
            username = request.form.get("username", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                actor = container.auth_service.authenticate(username, password)

                session.clear()
                session.permanent = bool(remember)
                app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
                remember_actor(actor)

                if actor.password_change_required:
                    flash("Please set a new password.", "info")
                    return redirect(url_for("change_password"))
                return redirect(url_for("dashboard"))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Login failed for %s", username)
                flash("System error during login", "danger")

        return render_template("login.html")

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("You have been logged out.", "info")
        return redirect(url_for("login"))

    @app.route("/password", methods=["GET", "POST"], endpoint="change_password")
    @login_required
    def change_password():
        actor = current_actor()
        if request.method == "POST":
            try:
                container.user_service.change_own_password(
                    actor=actor,
                    old_password=request.form.get("old_password", ""),
                    new_password=request.form.get("new_password", ""),
                    password_confirmation=request.form.get("confirm_password", ""),
                )
                remember_actor(container.auth_service.refresh(actor.user_id))
                flash("Password changed.", "success")
                return redirect(url_for("dashboard"))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Password change failed for %s", actor.username)
                flash("System error while changing the password", "danger")

        return render_template("change_password.html", forced=actor.password_change_required)

    @app.route("/admin/users", endpoint="admin_users")
    @role_required(Role.DIRECTOR)
    def admin_users():
        users = container.user_service.list_users(actor=current_actor())
        return render_template("admin/users.html", users=users, active_page="admin_users")

    @app.route("/admin/users/add", methods=["GET", "POST"], endpoint="add_user")
    @role_required(Role.DIRECTOR)
    def add_user():
        if request.method == "POST":
            form = request.form
            try:
                container.user_service.create_user(
                    actor=current_actor(),
                    username=form.get("username", ""),
                    email=form.get("email", ""),
                    first_name=form.get("first_name", ""),
                    last_name=form.get("last_name", ""),
                    password=form.get("password", ""),
                    password_confirmation=form.get("confirm_password", ""),
                    role=parse_enum(Role, (form.get("role") or "").lower(), "Role", default=Role.WORKER),
                    contract_type=parse_enum(
                        ContractType, (form.get("contract_type") or "").upper(), "Contract type", default=ContractType.UOP
                    ),
                    language=parse_enum(Language, (form.get("language") or "").upper(), "Language", default=Language.PL),
                    uop_gross_rate=parse_decimal(form.get("uop_gross_rate"), "UoP gross rate"),
                    b2b_hourly_net_rate=parse_decimal(form.get("b2b_hourly_net_rate"), "B2B hourly rate"),
                )
                flash("User created.", "success")
                return redirect(url_for("admin_users"))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Creating user failed")
                flash("System error while creating the user", "danger")

        return render_template("admin/user_form.html", user=None, form=request.form, active_page="add_user")

    @app.route("/admin/users/<int:user_id>/edit", methods=["GET", "POST"], endpoint="edit_user")
    @role_required(Role.DIRECTOR)
    def edit_user(user_id: int):
        try:
            user = container.user_service.get_user(user_id)
        except DomainError as e:
            flash(str(e), "danger")
            return redirect(url_for("admin_users"))

        if request.method == "POST":
            try:
                container.user_service.update_user(
                    actor=current_actor(), user_id=user_id, changes=_user_form_changes(request.form)
                )
                flash("User updated.", "success")
                return redirect(url_for("admin_users"))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Updating user %s failed", user_id)
                flash("System error while updating the user", "danger")

        return render_template("admin/user_form.html", user=user, form=request.form, active_page="admin_users")

    @app.route("/admin/users/<int:user_id>/toggle", methods=["POST"], endpoint="toggle_user")
    @role_required(Role.DIRECTOR)
    def toggle_user(user_id: int):
        try:
            user = container.user_service.get_user(user_id)
            container.user_service.set_active(actor=current_actor(), user_id=user_id, is_active=not user.is_active)
            flash("User deactivated." if user.is_active else "User activated.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Toggling user %s failed", user_id)
            flash("System error while updating the user", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<int:user_id>/password", methods=["POST"], endpoint="reset_user_password")
    @role_required(Role.DIRECTOR)
    def reset_user_password(user_id: int):
        try:
            container.user_service.reset_password(
                actor=current_actor(),
                user_id=user_id,
                new_password=request.form.get("new_password", ""),
                password_confirmation=request.form.get("confirm_password", ""),
            )
            flash("Password reset. The user must change it on next login.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Password reset for user %s failed", user_id)
            flash("System error while resetting the password", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<int:user_id>/delete", methods=["POST"], endpoint="delete_user")
    @role_required(Role.DIRECTOR)
    def delete_user(user_id: int):
        try:
            container.user_service.delete_user(actor=current_actor(), user_id=user_id)
            flash("User deleted.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting user %s failed", user_id)
            flash("System error while deleting the user", "danger")
        return redirect(url_for("admin_users"))

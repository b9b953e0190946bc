"""Session helpers shared by the page controllers."""

from __future__ import annotations

from functools import wraps

from flask import flash, redirect, render_template, request, session, url_for

from ..core.enums import Role
from ..users.service import SessionUser

SESSION_KEY = "actor"


def current_actor() -> SessionUser | None:
    data = session.get(SESSION_KEY)
    return SessionUser.from_dict(data) if data else None


def remember_actor(actor: SessionUser) -> None:
    session[SESSION_KEY] = actor.to_dict()


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = current_actor()
        if actor is None:
            flash("Please log in to continue.", "warning")
            return redirect(url_for("login"))
        if actor.password_change_required and request.endpoint not in ("change_password", "logout"):
            flash("Please change your password before continuing.", "warning")
            return redirect(url_for("change_password"))
        return view(*args, **kwargs)

    return wrapper


def role_required(*roles: Role):
    """Like login_required but answers 403 for other roles."""

    def decorator(view):
        @login_required
        @wraps(view)
        def wrapper(*args, **kwargs):
            actor = current_actor()
            if actor.role not in roles:
                return render_template("403.html", current_user=actor), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator

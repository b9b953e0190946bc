from __future__ import annotations

from functools import wraps
from typing import Any, Mapping

from flask import Blueprint, Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..common.datetime_utils import now_local, parse_iso_date, parse_optional_int, parse_time
from ..common.validators import parse_decimal, parse_enum
from ..container import Container
from ..core.enums import BillingType, ContractType, Language, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    ValidationError,
)
from ..entries.model import EntryChanges, EntryDraft
from ..projects.model import Project
from ..projects.service import TaskDraft
from ..users.model import UserChanges
from .serializers import (
    entry_to_json,
    month_view_to_json,
    project_to_json,
    report_to_json,
    task_to_json,
    user_to_json,
)
from .tokens import TokenService


def _json_body() -> Mapping[str, Any]:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("JSON object expected")
    return body


def _role(value: Any, default=None):
    return parse_enum(Role, str(value).lower() if value is not None else None, "Role", default=default)


def _contract(value: Any, default=None):
    return parse_enum(ContractType, str(value).upper() if value is not None else None, "Contract type", default=default)


def _language(value: Any, default=None):
    return parse_enum(Language, str(value).upper() if value is not None else None, "Language", default=default)


def _billing(value: Any, default=None):
    return parse_enum(BillingType, str(value).upper() if value is not None else None, "Billing type", default=default)


def _task_draft(body: Mapping[str, Any], current=None) -> TaskDraft:
    """Build a draft from JSON; missing keys fall back to the current task."""

    def pick(key: str, attr: str):
        if key in body:
            return body[key]
        return getattr(current, attr) if current is not None else None

    billing = _billing(body.get("billingType"), default=current.billing_type if current else BillingType.HOURLY)
    is_active = pick("isActive", "is_active")
    return TaskDraft(
        title=pick("title", "title") or "",
        number=pick("number", "number") or "",
        description=pick("description", "description"),
        billing_type=billing,
        unit_price=parse_decimal(pick("unitPrice", "unit_price"), "Unit price"),
        unit_name=pick("unitName", "unit_name"),
        is_active=True if is_active is None else bool(is_active),
        task_id=parse_optional_int(body.get("id"), "Task id"),
    )


def _project(body: Mapping[str, Any], current: Project | None = None) -> Project:
    def pick(key: str, attr: str):
        if key in body:
            return body[key]
        return getattr(current, attr) if current is not None else None

    is_active = pick("isActive", "is_active")
    return Project(
        project_id=current.project_id if current else 0,
        name=pick("name", "name") or "",
        number=pick("number", "number") or "",
        description=pick("description", "description"),
        manager_id=parse_optional_int(pick("managerId", "manager_id"), "Manager"),
        is_active=True if is_active is None else bool(is_active),
    )


def _id_list(value: Any, field_name: str) -> list[int]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{field_name} must be a list")
    ids = (parse_optional_int(v, field_name) for v in value)
    return [i for i in ids if i is not None]


def register(app: Flask, container: Container) -> None:
    api = Blueprint("api", __name__, url_prefix="/api")
    tokens = TokenService(app.secret_key, max_age_seconds=app.config.get("TOKEN_MAX_AGE_SECONDS", 12 * 3600))

    @api.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"message": e.message}), e.http_status

    @api.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"message": e.description}), e.code
        app.logger.exception("Unhandled API error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error"}), 500

    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            header = request.headers.get("Authorization", "")
            scheme, _, token = header.partition(" ")
            if scheme.lower() != "bearer" or not token.strip():
                raise AuthenticationError("Missing bearer token")
            claimed = tokens.verify(token.strip())
            # reload so deactivation and role changes apply to live tokens
            g.actor = container.auth_service.refresh(claimed.user_id)
            return view(*args, **kwargs)

        return wrapper

    # -- auth ----------------------------------------------------------------

    @api.route("/auth/login", methods=["POST"])
    def login():
        body = _json_body()
        actor = container.auth_service.authenticate(body.get("username", ""), body.get("password", ""))
        user = container.user_service.get_user(actor.user_id)
        expires_at = int(now_local().timestamp()) + tokens.max_age_seconds
        return jsonify(
            {
                "token": tokens.issue(actor),
                "expiresAt": expires_at * 1000,
                "role": actor.role.value,
                "language": actor.language.value,
                "username": actor.username,
                "user": user_to_json(user),
            }
        )

    # -- users ---------------------------------------------------------------

    @api.route("/users", methods=["GET"])
    @token_required
    def list_users():
        return jsonify([user_to_json(u) for u in container.user_service.list_users(actor=g.actor)])

    @api.route("/users", methods=["POST"])
    @token_required
    def create_user():
        body = _json_body()
        user_id = container.user_service.create_user(
            actor=g.actor,
            username=body.get("username", ""),
            email=body.get("email", ""),
            first_name=body.get("firstName", ""),
            last_name=body.get("lastName", ""),
            password=body.get("password", ""),
            password_confirmation=body.get("confirmPassword", ""),
            role=_role(body.get("role"), default=Role.WORKER),
            contract_type=_contract(body.get("contractType"), default=ContractType.UOP),
            language=_language(body.get("language"), default=Language.PL),
            uop_gross_rate=parse_decimal(body.get("uopGrossRate"), "UoP gross rate"),
            b2b_hourly_net_rate=parse_decimal(body.get("b2bHourlyNetRate"), "B2B hourly rate"),
            is_active=bool(body.get("isActive", True)),
        )
        return jsonify(user_to_json(container.user_service.get_user(user_id))), 201

    @api.route("/users/<int:user_id>", methods=["GET"])
    @token_required
    def get_user(user_id: int):
        if g.actor.user_id != user_id and not g.actor.role.can_review:
            raise AuthorizationError("You can only view your own account")
        return jsonify(user_to_json(container.user_service.get_user(user_id)))

    @api.route("/users/<int:user_id>", methods=["PUT"])
    @token_required
    def update_user(user_id: int):
        body = _json_body()
        is_active = body.get("isActive")
        changes = UserChanges(
            email=body.get("email"),
            first_name=body.get("firstName"),
            last_name=body.get("lastName"),
            role=_role(body.get("role")),
            contract_type=_contract(body.get("contractType")),
            language=_language(body.get("language")),
            uop_gross_rate=parse_decimal(body.get("uopGrossRate"), "UoP gross rate"),
            b2b_hourly_net_rate=parse_decimal(body.get("b2bHourlyNetRate"), "B2B hourly rate"),
            is_active=None if is_active is None else bool(is_active),
        )
        user = container.user_service.update_user(actor=g.actor, user_id=user_id, changes=changes)
        return jsonify(user_to_json(user))

    @api.route("/users/<int:user_id>", methods=["DELETE"])
    @token_required
    def delete_user(user_id: int):
        container.user_service.delete_user(actor=g.actor, user_id=user_id)
        return "", 204

    @api.route("/users/<int:user_id>/password", methods=["PUT"])
    @token_required
    def reset_password(user_id: int):
        body = _json_body()
        container.user_service.reset_password(
            actor=g.actor,
            user_id=user_id,
            new_password=body.get("newPassword", ""),
            password_confirmation=body.get("confirmPassword", ""),
        )
        return "", 204

    @api.route("/users/me/password", methods=["PUT"])
    @token_required
    def change_my_password():
        body = _json_body()
        container.user_service.change_own_password(
            actor=g.actor,
            old_password=body.get("oldPassword", ""),
            new_password=body.get("newPassword", ""),
            password_confirmation=body.get("confirmPassword", ""),
        )
        return "", 204

    # -- projects ------------------------------------------------------------

    def _project_json(project_id: int) -> dict:
        details = container.project_service.get_details(project_id)
        data = project_to_json(details.project)
        data["tasks"] = [task_to_json(t) for t in details.tasks]
        data["memberIds"] = list(details.member_ids)
        return data

    @api.route("/projects", methods=["GET"])
    @token_required
    def list_projects():
        active_only = request.args.get("active", "").lower() in ("1", "true", "yes")
        return jsonify([project_to_json(p) for p in container.project_service.list_projects(active_only=active_only)])

    @api.route("/projects/<int:project_id>", methods=["GET"])
    @token_required
    def get_project(project_id: int):
        return jsonify(_project_json(project_id))

    @api.route("/projects", methods=["POST"])
    @token_required
    def create_project():
        body = _json_body()
        project_id = container.project_service.create_project(
            actor=g.actor,
            project=_project(body),
            tasks=[_task_draft(t) for t in body.get("tasks") or []],
            member_ids=_id_list(body.get("memberIds"), "memberIds"),
        )
        return jsonify(_project_json(project_id)), 201

    @api.route("/projects/<int:project_id>", methods=["PUT"])
    @token_required
    def update_project(project_id: int):
        body = _json_body()
        current = container.project_service.get_project(project_id)
        tasks = None
        if "tasks" in body:
            existing = {t.task_id: t for t in container.project_service.list_tasks(project_id)}
            tasks = [_task_draft(t, existing.get(parse_optional_int(t.get("id"), "Task id"))) for t in body["tasks"] or []]
        member_ids = _id_list(body["memberIds"], "memberIds") if "memberIds" in body else None
        container.project_service.update_project(
            actor=g.actor, project=_project(body, current), tasks=tasks, member_ids=member_ids
        )
        return jsonify(_project_json(project_id))

    @api.route("/projects/<int:project_id>", methods=["DELETE"])
    @token_required
    def delete_project(project_id: int):
        container.project_service.delete_project(actor=g.actor, project_id=project_id)
        return "", 204

    @api.route("/projects/<int:project_id>/members", methods=["GET"])
    @token_required
    def list_members(project_id: int):
        ids = container.project_service.list_member_ids(project_id)
        return jsonify([user_to_json(container.user_service.get_user(uid)) for uid in ids])

    @api.route("/projects/<int:project_id>/members", methods=["PUT"])
    @token_required
    def replace_members(project_id: int):
        body = _json_body()
        container.project_service.replace_members(
            actor=g.actor, project_id=project_id, user_ids=_id_list(body.get("userIds"), "userIds")
        )
        return "", 204

    # -- tasks ---------------------------------------------------------------

    @api.route("/tasks/project/<int:project_id>", methods=["GET"])
    @token_required
    def list_tasks(project_id: int):
        container.project_service.get_project(project_id)
        return jsonify([task_to_json(t) for t in container.project_service.list_tasks(project_id)])

    @api.route("/tasks/project/<int:project_id>", methods=["POST"])
    @token_required
    def create_task(project_id: int):
        task_id = container.project_service.create_task(
            actor=g.actor, project_id=project_id, draft=_task_draft(_json_body())
        )
        return jsonify(task_to_json(container.project_service.get_task(task_id))), 201

    @api.route("/tasks/<int:task_id>", methods=["PUT"])
    @token_required
    def update_task(task_id: int):
        current = container.project_service.get_task(task_id)
        task = container.project_service.update_task(
            actor=g.actor, task_id=task_id, draft=_task_draft(_json_body(), current)
        )
        return jsonify(task_to_json(task))

    @api.route("/tasks/<int:task_id>", methods=["DELETE"])
    @token_required
    def delete_task(task_id: int):
        container.project_service.delete_task(actor=g.actor, task_id=task_id)
        return "", 204

    # -- time entries --------------------------------------------------------

    def _month_args() -> tuple[int, int]:
        today = now_local().date()
        year = parse_optional_int(request.args.get("year"), "year") or today.year
        month = parse_optional_int(request.args.get("month"), "month") or today.month
        return year, month

    @api.route("/time-entries", methods=["GET"])
    @token_required
    def list_my_entries():
        year, month = _month_args()
        entries = container.entry_service.list_month(actor=g.actor, user_id=g.actor.user_id, year=year, month=month)
        return jsonify([entry_to_json(e) for e in entries])

    @api.route("/time-entries/user/<int:user_id>/month/<int:year>/<int:month>", methods=["GET"])
    @token_required
    def list_user_month(user_id: int, year: int, month: int):
        entries = container.entry_service.list_month(actor=g.actor, user_id=user_id, year=year, month=month)
        return jsonify([entry_to_json(e) for e in entries])

    @api.route("/time-entries/user/<int:user_id>", methods=["GET"])
    @token_required
    def list_user_recent(user_id: int):
        limit = parse_optional_int(request.args.get("limit"), "limit") or 50
        entries = container.entry_service.list_recent(actor=g.actor, user_id=user_id, limit=limit)
        return jsonify([entry_to_json(e) for e in entries])

    @api.route("/time-entries/pending", methods=["GET"])
    @token_required
    def list_pending():
        return jsonify([entry_to_json(e) for e in container.entry_service.list_pending(actor=g.actor)])

    @api.route("/time-entries", methods=["POST"])
    @token_required
    def create_entry():
        body = _json_body()
        project_id = parse_optional_int(body.get("projectId"), "projectId")
        if project_id is None:
            raise ValidationError("Project is required")
        draft = EntryDraft(
            project_id=project_id,
            task_id=parse_optional_int(body.get("taskId", body.get("subprojectId")), "taskId"),
            work_date=parse_iso_date(body.get("date", "")),
            hours=parse_decimal(body.get("totalHours", body.get("hours")), "Hours"),
            quantity=parse_decimal(body.get("quantity"), "Quantity"),
            hours_from=parse_time(body.get("hoursFrom")),
            hours_to=parse_time(body.get("hoursTo")),
            description=body.get("description"),
            user_id=parse_optional_int(body.get("userId"), "userId"),
        )
        entry_id = container.entry_service.create_entry(actor=g.actor, draft=draft)
        return jsonify(entry_to_json(container.entry_service.get_entry(entry_id))), 201

    @api.route("/time-entries/<int:entry_id>", methods=["PUT"])
    @token_required
    def update_entry(entry_id: int):
        body = _json_body()
        changes = EntryChanges(
            work_date=parse_iso_date(body["date"]) if body.get("date") else None,
            hours=parse_decimal(body.get("totalHours", body.get("hours")), "Hours"),
            quantity=parse_decimal(body.get("quantity"), "Quantity"),
            hours_from=parse_time(body.get("hoursFrom")),
            hours_to=parse_time(body.get("hoursTo")),
            description=body.get("description"),
        )
        entry = container.entry_service.update_entry(actor=g.actor, entry_id=entry_id, changes=changes)
        return jsonify(entry_to_json(entry))

    @api.route("/time-entries/<int:entry_id>", methods=["DELETE"])
    @token_required
    def delete_entry(entry_id: int):
        container.entry_service.delete_entry(actor=g.actor, entry_id=entry_id)
        return "", 204

    @api.route("/time-entries/<int:entry_id>/approve", methods=["PUT"])
    @token_required
    def approve_entry(entry_id: int):
        return jsonify(entry_to_json(container.entry_service.approve_entry(actor=g.actor, entry_id=entry_id)))

    @api.route("/time-entries/<int:entry_id>/reject", methods=["PUT"])
    @token_required
    def reject_entry(entry_id: int):
        return jsonify(entry_to_json(container.entry_service.reject_entry(actor=g.actor, entry_id=entry_id)))

    # -- calendar & reports --------------------------------------------------

    @api.route("/calendar/<int:year>/<int:month>", methods=["GET"])
    @token_required
    def calendar(year: int, month: int):
        user_id = parse_optional_int(request.args.get("userId"), "userId")
        view = container.month_view_service.month_for(actor=g.actor, user_id=user_id, year=year, month=month)
        return jsonify(month_view_to_json(view))

    @api.route("/reports/monthly", methods=["GET"])
    @token_required
    def monthly_report():
        year, month = _month_args()
        user_id = parse_optional_int(request.args.get("userId"), "userId") or g.actor.user_id
        report = container.report_service.build(
            actor=g.actor,
            user_id=user_id,
            year=year,
            month=month,
            currency=request.args.get("currency", "PLN"),
        )
        return jsonify(report_to_json(report))

    app.register_blueprint(api)

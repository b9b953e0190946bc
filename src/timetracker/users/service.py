from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import (
    require_email,
    require_matching,
    require_min_length,
    require_non_empty,
    require_positive,
    validate_password_strength,
)
from ..core.constants import PASSWORD_MIN_LENGTH
from ..core.enums import ContractType, Language, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import User, UserChanges
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _password_matches(password_hash: str, password: Optional[str]) -> bool:
    try:
        return check_password_hash(password_hash, password or "")
    except ValueError:
        # placeholder or corrupted hashes
        return False


@dataclass(frozen=True)
class SessionUser:
    """Who is acting: stored in the Flask session or carried by an API token."""

    user_id: int
    username: str
    full_name: str
    role: Role
    language: Language = Language.PL
    password_change_required: bool = False

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "full_name": self.full_name,
            "role": self.role.value,
            "language": self.language.value,
            "password_change_required": self.password_change_required,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionUser":
        return cls(
            user_id=int(data["user_id"]),
            username=str(data["username"]),
            full_name=str(data.get("full_name", "")),
            role=Role(data["role"]),
            language=Language(data.get("language", Language.PL.value)),
            password_change_required=bool(data.get("password_change_required", False)),
        )

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(
            user_id=user.user_id,
            username=user.username,
            full_name=user.full_name,
            role=user.role,
            language=user.language,
            password_change_required=user.password_change_required,
        )


def require_director(actor: SessionUser) -> None:
    if actor.role != Role.DIRECTOR:
        raise AuthorizationError("Only a director can manage users")


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user:
            raise AuthenticationError("Invalid username or password")
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        if not _password_matches(user.password_hash, password):
            logger.warning("Password mismatch for user %s", user.username)
            raise AuthenticationError("Invalid username or password")

        logger.info("User %s logged in", user.username)
        return SessionUser.from_user(user)

    def refresh(self, user_id: int) -> SessionUser:
        """Reload the session value, e.g. after a token is presented again."""
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("User account is deactivated")
        return SessionUser.from_user(user)


class UserService:
    """Use case: manage users (director) and own password (everyone)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, *, actor: SessionUser) -> Sequence[User]:
        if not actor.role.can_review:
            raise AuthorizationError("You are not allowed to list users")
        return self._users.list_all()

    def create_user(
        self,
        *,
        actor: SessionUser,
        username: str,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        password_confirmation: str,
        role: Role = Role.WORKER,
        contract_type: ContractType = ContractType.UOP,
        language: Language = Language.PL,
        uop_gross_rate: Optional[Decimal] = None,
        b2b_hourly_net_rate: Optional[Decimal] = None,
        is_active: bool = True,
    ) -> int:
        require_director(actor)

        username = require_non_empty(username, "Username")
        email = require_email(email)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        require_positive(uop_gross_rate, "UoP gross rate")
        require_positive(b2b_hourly_net_rate, "B2B hourly rate")
        require_min_length(password, "Password", PASSWORD_MIN_LENGTH)
        require_matching(password, password_confirmation)

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")
        if self._users.get_by_email(email):
            raise ValidationError("Email already exists")

        user_id = self._users.create_user(
            User(
                user_id=0,
                username=username,
                email=email,
                first_name=first_name,
                last_name=last_name,
                password_hash=generate_password_hash(password),
                role=role,
                contract_type=contract_type,
                language=language,
                uop_gross_rate=uop_gross_rate,
                b2b_hourly_net_rate=b2b_hourly_net_rate,
                is_active=is_active,
                password_change_required=True,
            )
        )
        logger.info("User %s created by %s", username, actor.username)
        return user_id

    def update_user(self, *, actor: SessionUser, user_id: int, changes: UserChanges) -> User:
        require_director(actor)
        current = self.get_user(user_id)

        if changes.email is not None:
            email = require_email(changes.email)
            other = self._users.get_by_email(email)
            if other and other.user_id != current.user_id:
                raise ValidationError("Email already exists")
            changes = replace(changes, email=email)
        if changes.first_name is not None:
            changes = replace(changes, first_name=require_non_empty(changes.first_name, "First name"))
        if changes.last_name is not None:
            changes = replace(changes, last_name=require_non_empty(changes.last_name, "Last name"))
        require_positive(changes.uop_gross_rate, "UoP gross rate")
        require_positive(changes.b2b_hourly_net_rate, "B2B hourly rate")

        if current.user_id == actor.user_id:
            if changes.role is not None and changes.role != Role.DIRECTOR:
                raise ValidationError("You cannot demote your own account")
            if changes.is_active is False:
                raise ValidationError("You cannot deactivate your own account")

        self._users.update_user(current.user_id, changes)
        return self.get_user(current.user_id)

    def set_active(self, *, actor: SessionUser, user_id: int, is_active: bool) -> User:
        return self.update_user(actor=actor, user_id=user_id, changes=UserChanges(is_active=bool(is_active)))

    def reset_password(
        self,
        *,
        actor: SessionUser,
        user_id: int,
        new_password: str,
        password_confirmation: str,
    ) -> None:
        """Director sets a temporary password; the user must change it on next login."""
        require_director(actor)
        user = self.get_user(user_id)
        require_min_length(new_password, "Password", PASSWORD_MIN_LENGTH)
        require_matching(new_password, password_confirmation)

        self._users.set_password(
            user.user_id,
            password_hash=generate_password_hash(new_password),
            change_required=True,
        )
        logger.info("Password of %s reset by %s", user.username, actor.username)

    def change_own_password(
        self,
        *,
        actor: SessionUser,
        old_password: str,
        new_password: str,
        password_confirmation: str,
    ) -> None:
        user = self.get_user(actor.user_id)
        if not _password_matches(user.password_hash, old_password):
            raise ValidationError("Old password is incorrect")

        require_matching(new_password, password_confirmation)
        validate_password_strength(new_password)
        if new_password == old_password:
            raise ValidationError("New password must differ from the old one")

        self._users.set_password(
            user.user_id,
            password_hash=generate_password_hash(new_password),
            change_required=False,
        )

    def delete_user(self, *, actor: SessionUser, user_id: int) -> None:
        require_director(actor)

        user = self.get_user(user_id)
        if user.user_id == actor.user_id:
            raise ValidationError("You cannot delete your own account")

        if not self._users.delete_by_id(user.user_id):
            raise ValidationError("Deleting the user failed")
        logger.info("User %s deleted by %s", user.username, actor.username)

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User, UserChanges


class UserRepository(Protocol):
    """Repository interface for User.

    Note: services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def create_user(self, user: User) -> int:
        """Persist a new user; user.user_id is ignored."""

        raise NotImplementedError

    def update_user(self, user_id: int, changes: UserChanges) -> bool:
        raise NotImplementedError

    def set_password(self, user_id: int, *, password_hash: str, change_required: bool) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

from __future__ import annotations

from dataclasses import fields
from typing import Optional, Sequence

from ..core.enums import ContractType, Language, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import User, UserChanges
from .repository import UserRepository

_COLUMNS = """
    user_id, username, email, first_name, last_name, password_hash, role, contract_type,
    language, uop_gross_rate, b2b_hourly_net_rate, is_active, password_change_required
"""


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        contract_type=ContractType(row["contract_type"]),
        language=Language(row["language"]),
        uop_gross_rate=to_decimal(row.get("uop_gross_rate")),
        b2b_hourly_net_rate=to_decimal(row.get("b2b_hourly_net_rate")),
        is_active=bool(row.get("is_active", True)),
        password_change_required=bool(row.get("password_change_required", False)),
    )


def _db_value(value):
    if isinstance(value, (Role, ContractType, Language)):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, clause: str, value) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {clause}=%s", (value,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_where("user_id", int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        return self._get_where("username", username)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_where("email", email)

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY last_name, first_name")
            return [_row_to_user(r) for r in fetchall(cur)]

    def create_user(self, user: User) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(username, email, first_name, last_name, password_hash, role, contract_type,
                                  language, uop_gross_rate, b2b_hourly_net_rate, is_active, password_change_required)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.username,
                    user.email,
                    user.first_name,
                    user.last_name,
                    user.password_hash,
                    user.role.value,
                    user.contract_type.value,
                    user.language.value,
                    user.uop_gross_rate,
                    user.b2b_hourly_net_rate,
                    int(user.is_active),
                    int(user.password_change_required),
                ),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, changes: UserChanges) -> bool:
        assignments = []
        params = []
        for f in fields(changes):
            value = getattr(changes, f.name)
            if value is None:
                continue
            assignments.append(f"{f.name}=%s")
            params.append(_db_value(value))

        if not assignments:
            return self.get_by_id(user_id) is not None

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE users SET {', '.join(assignments)} WHERE user_id=%s", (*params, int(user_id)))
            return cur.rowcount > 0

    def set_password(self, user_id: int, *, password_hash: str, change_required: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET password_hash=%s, password_change_required=%s WHERE user_id=%s",
                (password_hash, int(change_required), int(user_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

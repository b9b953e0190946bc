from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import BillingType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import Task
from .repository import TaskRepository

_COLUMNS = "task_id, project_id, title, number, description, billing_type, unit_price, unit_name, is_active"


def _row_to_task(row: dict) -> Task:
    return Task(
        task_id=int(row["task_id"]),
        project_id=int(row["project_id"]),
        title=row["title"],
        number=row["number"],
        description=row.get("description"),
        billing_type=BillingType(row["billing_type"]),
        unit_price=to_decimal(row.get("unit_price")),
        unit_name=row.get("unit_name"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE task_id=%s", (int(task_id),))
            row = fetchone(cur)
            return _row_to_task(row) if row else None

    def list_for_project(self, project_id: int) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE project_id=%s ORDER BY number", (int(project_id),))
            return [_row_to_task(r) for r in fetchall(cur)]

    def create_task(self, task: Task) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(project_id, title, number, description, billing_type, unit_price, unit_name, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    task.project_id,
                    task.title,
                    task.number,
                    task.description,
                    task.billing_type.value,
                    task.unit_price,
                    task.unit_name,
                    int(task.is_active),
                ),
            )
            return int(cur.lastrowid)

    def update_task(self, task: Task) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET title=%s, number=%s, description=%s, billing_type=%s, unit_price=%s, unit_name=%s, is_active=%s
                WHERE task_id=%s
                """,
                (
                    task.title,
                    task.number,
                    task.description,
                    task.billing_type.value,
                    task.unit_price,
                    task.unit_name,
                    int(task.is_active),
                    task.task_id,
                ),
            )
            return cur.rowcount > 0

    def delete_by_id(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (int(task_id),))
            return cur.rowcount > 0

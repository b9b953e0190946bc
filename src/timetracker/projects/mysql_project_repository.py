from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Project
from .repository import ProjectRepository


def _row_to_project(row: dict) -> Project:
    return Project(
        project_id=int(row["project_id"]),
        name=row["name"],
        number=row["number"],
        description=row.get("description"),
        manager_id=row.get("manager_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT project_id, name, number, description, manager_id, is_active FROM projects WHERE project_id=%s",
                (int(project_id),),
            )
            row = fetchone(cur)
            return _row_to_project(row) if row else None

    def list_all(self, *, active_only: bool = False) -> Sequence[Project]:
        sql = "SELECT project_id, name, number, description, manager_id, is_active FROM projects"
        if active_only:
            sql += " WHERE is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY number, name")
            return [_row_to_project(r) for r in fetchall(cur)]

    def create_project(self, project: Project) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO projects(name, number, description, manager_id, is_active) VALUES(%s,%s,%s,%s,%s)",
                (project.name, project.number, project.description, project.manager_id, int(project.is_active)),
            )
            return int(cur.lastrowid)

    def update_project(self, project: Project) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE projects
                SET name=%s, number=%s, description=%s, manager_id=%s, is_active=%s
                WHERE project_id=%s
                """,
                (
                    project.name,
                    project.number,
                    project.description,
                    project.manager_id,
                    int(project.is_active),
                    project.project_id,
                ),
            )
            return cur.rowcount > 0

    def delete_by_id(self, project_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM projects WHERE project_id=%s", (int(project_id),))
            return cur.rowcount > 0

    def list_member_ids(self, project_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM project_members WHERE project_id=%s ORDER BY user_id", (int(project_id),))
            return [int(r["user_id"]) for r in fetchall(cur)]

    def replace_members(self, project_id: int, user_ids: Iterable[int]) -> None:
        # one transaction: delete then re-insert
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM project_members WHERE project_id=%s", (int(project_id),))
            rows = [(int(project_id), int(uid)) for uid in user_ids]
            if rows:
                cur.executemany("INSERT INTO project_members(project_id, user_id) VALUES(%s,%s)", rows)

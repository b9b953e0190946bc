from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Project, Task


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = False) -> Sequence[Project]:
        raise NotImplementedError

    def create_project(self, project: Project) -> int:
        raise NotImplementedError

    def update_project(self, project: Project) -> bool:
        raise NotImplementedError

    def delete_by_id(self, project_id: int) -> bool:
        raise NotImplementedError

    def list_member_ids(self, project_id: int) -> Sequence[int]:
        raise NotImplementedError

    def replace_members(self, project_id: int, user_ids: Iterable[int]) -> None:
        raise NotImplementedError


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_for_project(self, project_id: int) -> Sequence[Task]:
        raise NotImplementedError

    def create_task(self, task: Task) -> int:
        raise NotImplementedError

    def update_task(self, task: Task) -> bool:
        raise NotImplementedError

    def delete_by_id(self, task_id: int) -> bool:
        raise NotImplementedError

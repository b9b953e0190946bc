from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..common.validators import optional_text, require_max_length, require_non_empty
from ..core.constants import PROJECT_NUMBER_MAX_LENGTH, TASK_SUFFIX_MAX_LENGTH
from ..core.enums import BillingType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from ..users.service import SessionUser
from .model import Project, Task
from .repository import ProjectRepository, TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskDraft:
    """Task fields as submitted from a form or JSON body."""

    title: str
    number: str
    description: Optional[str] = None
    billing_type: BillingType = BillingType.HOURLY
    unit_price: Optional[Decimal] = None
    unit_name: Optional[str] = None
    is_active: bool = True
    task_id: Optional[int] = None


@dataclass(frozen=True)
class ProjectDetails:
    project: Project
    tasks: Sequence[Task] = field(default_factory=list)
    member_ids: Sequence[int] = field(default_factory=list)


def require_project_editor(actor: SessionUser) -> None:
    if not actor.role.can_review:
        raise AuthorizationError("Only managers and directors can edit projects")


def validate_task_draft(project: Project, draft: TaskDraft) -> TaskDraft:
    """Normalize a draft against its project; raises ValidationError."""
    title = require_non_empty(draft.title, "Task title")
    number = require_non_empty(draft.number, "Task number")

    prefix = project.task_number_prefix
    if not number.startswith(prefix):
        raise ValidationError(f"Task number must start with {prefix}")
    suffix = number[len(prefix):]
    if not suffix:
        raise ValidationError(f"Task number suffix is required after {prefix}")
    if len(suffix) > TASK_SUFFIX_MAX_LENGTH:
        raise ValidationError(f"Task number suffix must be at most {TASK_SUFFIX_MAX_LENGTH} characters")

    if draft.billing_type == BillingType.UNIT:
        if draft.unit_price is None:
            raise ValidationError("Unit price is required for UNIT billing")
        if draft.unit_price < 0:
            raise ValidationError("Unit price cannot be negative")
        unit_name = optional_text(draft.unit_name)
        if not unit_name:
            raise ValidationError("Unit name is required for UNIT billing")
        unit_price = draft.unit_price
    else:
        unit_name = None
        unit_price = None

    return TaskDraft(
        title=title,
        number=number,
        description=optional_text(draft.description),
        billing_type=draft.billing_type,
        unit_price=unit_price,
        unit_name=unit_name,
        is_active=draft.is_active,
        task_id=draft.task_id,
    )


class ProjectService:
    """Use case: nested project / task editor."""

    def __init__(self, projects: ProjectRepository, tasks: TaskRepository, users: Optional[UserRepository] = None):
        self._projects = projects
        self._tasks = tasks
        self._users = users

    # -- projects ------------------------------------------------------------

    def get_project(self, project_id: int) -> Project:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        return project

    def list_projects(self, *, active_only: bool = False) -> Sequence[Project]:
        return self._projects.list_all(active_only=active_only)

    def get_details(self, project_id: int) -> ProjectDetails:
        project = self.get_project(project_id)
        return ProjectDetails(
            project=project,
            tasks=list(self._tasks.list_for_project(project.project_id)),
            member_ids=list(self._projects.list_member_ids(project.project_id)),
        )

    def _validated_project(self, project: Project) -> Project:
        name = require_non_empty(project.name, "Project name")
        number = require_non_empty(project.number, "Project number")
        require_max_length(number, "Project number", PROJECT_NUMBER_MAX_LENGTH)
        if project.manager_id is not None and self._users and not self._users.get_by_id(project.manager_id):
            raise ValidationError("Project manager does not exist")
        return Project(
            project_id=project.project_id,
            name=name,
            number=number,
            description=optional_text(project.description),
            manager_id=project.manager_id,
            is_active=project.is_active,
        )

    def create_project(
        self,
        *,
        actor: SessionUser,
        project: Project,
        tasks: Iterable[TaskDraft] = (),
        member_ids: Optional[Iterable[int]] = None,
    ) -> int:
        """Create a project with its tasks; all drafts are validated before anything is written."""
        require_project_editor(actor)
        project = self._validated_project(project)
        if project.manager_id is None:
            project = replace(project, manager_id=actor.user_id)
        drafts = [validate_task_draft(project, d) for d in tasks]

        project_id = self._projects.create_project(project)
        for draft in drafts:
            self._tasks.create_task(self._draft_to_task(project_id, draft))
        if member_ids:
            self._projects.replace_members(project_id, sorted({int(u) for u in member_ids}))

        logger.info("Project %s created by %s with %d task(s)", project.number, actor.username, len(drafts))
        return project_id

    def update_project(
        self,
        *,
        actor: SessionUser,
        project: Project,
        tasks: Optional[Iterable[TaskDraft]] = None,
        member_ids: Optional[Iterable[int]] = None,
    ) -> Project:
        """Update a project; when tasks is given it is the complete new task list.

        Tasks missing from the list are deleted, tasks with an id are updated
        and the rest are created.
        """
        require_project_editor(actor)
        current = self.get_project(project.project_id)
        project = self._validated_project(project)

        drafts = None
        if tasks is not None:
            drafts = [validate_task_draft(project, d) for d in tasks]
            existing_ids = {t.task_id for t in self._tasks.list_for_project(current.project_id)}
            for d in drafts:
                if d.task_id is not None and d.task_id not in existing_ids:
                    raise ValidationError("Task does not belong to this project")

        self._projects.update_project(project)

        if drafts is not None:
            kept_ids = {d.task_id for d in drafts if d.task_id is not None}
            for task_id in existing_ids - kept_ids:
                self._tasks.delete_by_id(task_id)
            for d in drafts:
                task = self._draft_to_task(current.project_id, d)
                if d.task_id is None:
                    self._tasks.create_task(task)
                else:
                    self._tasks.update_task(task)

        if member_ids is not None:
            self._projects.replace_members(current.project_id, sorted({int(u) for u in member_ids}))

        return self.get_project(current.project_id)

    def delete_project(self, *, actor: SessionUser, project_id: int) -> None:
        require_project_editor(actor)
        project = self.get_project(project_id)
        if not self._projects.delete_by_id(project.project_id):
            raise ValidationError("Deleting the project failed")
        logger.info("Project %s deleted by %s", project.number, actor.username)

    def list_member_ids(self, project_id: int) -> Sequence[int]:
        project = self.get_project(project_id)
        return self._projects.list_member_ids(project.project_id)

    def replace_members(self, *, actor: SessionUser, project_id: int, user_ids: Iterable[int]) -> None:
        require_project_editor(actor)
        project = self.get_project(project_id)
        ids = sorted({int(u) for u in user_ids})
        if self._users:
            missing = [uid for uid in ids if not self._users.get_by_id(uid)]
            if missing:
                raise ValidationError(f"Unknown user id(s): {', '.join(str(m) for m in missing)}")
        self._projects.replace_members(project.project_id, ids)

    # -- tasks ---------------------------------------------------------------

    @staticmethod
    def _draft_to_task(project_id: int, draft: TaskDraft) -> Task:
        return Task(
            task_id=draft.task_id or 0,
            project_id=int(project_id),
            title=draft.title,
            number=draft.number,
            description=draft.description,
            billing_type=draft.billing_type,
            unit_price=draft.unit_price,
            unit_name=draft.unit_name,
            is_active=draft.is_active,
        )

    def get_task(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def list_tasks(self, project_id: int) -> Sequence[Task]:
        return self._tasks.list_for_project(int(project_id))

    def create_task(self, *, actor: SessionUser, project_id: int, draft: TaskDraft) -> int:
        require_project_editor(actor)
        project = self.get_project(project_id)
        draft = validate_task_draft(project, draft)
        return self._tasks.create_task(self._draft_to_task(project.project_id, draft))

    def update_task(self, *, actor: SessionUser, task_id: int, draft: TaskDraft) -> Task:
        require_project_editor(actor)
        current = self.get_task(task_id)
        project = self.get_project(current.project_id)
        draft = validate_task_draft(project, draft)
        task = self._draft_to_task(project.project_id, draft)
        self._tasks.update_task(replace(task, task_id=current.task_id))
        return self.get_task(current.task_id)

    def delete_task(self, *, actor: SessionUser, task_id: int) -> None:
        require_project_editor(actor)
        task = self.get_task(task_id)
        if not self._tasks.delete_by_id(task.task_id):
            raise ValidationError("Deleting the task failed")

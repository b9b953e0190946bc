from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import optional_text, require_in_range
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_ENTRY_HOURS, MIN_ENTRY_HOURS
from ..core.enums import BillingType, EntryStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..projects.model import Task
from ..projects.repository import ProjectRepository, TaskRepository
from ..users.service import SessionUser
from .model import EntryChanges, EntryDraft, TimeEntry
from .repository import TimeEntryRepository

logger = logging.getLogger(__name__)


def hours_between(hours_from: time, hours_to: time) -> Decimal:
    """Span between two clock times in hours, 2 places, half-up."""
    if hours_to <= hours_from:
        raise ValidationError("End time must be after start time")
    minutes = (hours_to.hour * 60 + hours_to.minute) - (hours_from.hour * 60 + hours_from.minute)
    return (Decimal(minutes) / Decimal(60)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def resolve_measure(
    billing_type: BillingType,
    *,
    hours: Optional[Decimal],
    quantity: Optional[Decimal],
    hours_from: Optional[time],
    hours_to: Optional[time],
) -> tuple[Optional[Decimal], Optional[Decimal], Optional[time], Optional[time]]:
    """Validate and return (hours, quantity, hours_from, hours_to) for a billing type."""
    if billing_type == BillingType.UNIT:
        if quantity is None:
            raise ValidationError("Quantity is required for unit-based tasks")
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")
        return None, quantity, None, None

    if (hours_from is None) != (hours_to is None):
        raise ValidationError("Both start and end time are required")
    if hours is None:
        if hours_from is None:
            raise ValidationError("Hours are required")
        hours = hours_between(hours_from, hours_to)
    elif hours_from is not None:
        # keep the clock range consistent with the total when both are sent
        hours_between(hours_from, hours_to)
    require_in_range(hours, "Hours", MIN_ENTRY_HOURS, MAX_ENTRY_HOURS)
    return hours, None, hours_from, hours_to


class TimeEntryService:
    """Use case: log, edit and review time entries."""

    def __init__(self, entries: TimeEntryRepository, projects: ProjectRepository, tasks: TaskRepository):
        self._entries = entries
        self._projects = projects
        self._tasks = tasks

    @staticmethod
    def _require_access(actor: SessionUser, user_id: int) -> None:
        if actor.user_id != int(user_id) and not actor.role.can_review:
            raise AuthorizationError("You can only access your own entries")

    @staticmethod
    def _require_reviewer(actor: SessionUser) -> None:
        if not actor.role.can_review:
            raise AuthorizationError("Only managers and directors can review entries")

    def _resolve_task(self, project_id: int, task_id: Optional[int]) -> Optional[Task]:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise ValidationError("Project not found")
        if not project.is_active:
            raise ValidationError("Project is not active")
        if task_id is None:
            return None

        task = self._tasks.get_by_id(int(task_id))
        if not task or task.project_id != project.project_id:
            raise ValidationError("Task does not belong to the selected project")
        if not task.is_active:
            raise ValidationError("Task is not active")
        return task

    def get_entry(self, entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("Time entry not found")
        return entry

    def create_entry(self, *, actor: SessionUser, draft: EntryDraft) -> int:
        user_id = int(draft.user_id) if draft.user_id is not None else actor.user_id
        self._require_access(actor, user_id)

        task = self._resolve_task(draft.project_id, draft.task_id)
        billing_type = task.billing_type if task else BillingType.HOURLY
        hours, quantity, hours_from, hours_to = resolve_measure(
            billing_type,
            hours=draft.hours,
            quantity=draft.quantity,
            hours_from=draft.hours_from,
            hours_to=draft.hours_to,
        )

        entry_id = self._entries.create_entry(
            TimeEntry(
                entry_id=0,
                user_id=user_id,
                project_id=int(draft.project_id),
                task_id=task.task_id if task else None,
                work_date=draft.work_date,
                hours=hours,
                quantity=quantity,
                hours_from=hours_from,
                hours_to=hours_to,
                description=optional_text(draft.description),
                status=EntryStatus.SUBMITTED,
                billing_type=billing_type,
                unit_name=task.unit_name if task else None,
                unit_price=task.unit_price if task else None,
            )
        )
        logger.info("Entry %s created for user %s on %s", entry_id, user_id, draft.work_date)
        return entry_id

    def list_month(self, *, actor: SessionUser, user_id: int, year: int, month: int) -> Sequence[TimeEntry]:
        self._require_access(actor, user_id)
        start, end = month_bounds(year, month)
        return self._entries.list_for_user_between(int(user_id), start_date=start, end_date=end)

    def list_recent(self, *, actor: SessionUser, user_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[TimeEntry]:
        self._require_access(actor, user_id)
        return self._entries.list_recent_for_user(int(user_id), limit)

    def list_pending(self, *, actor: SessionUser, limit: int = 200) -> Sequence[TimeEntry]:
        self._require_reviewer(actor)
        return self._entries.list_by_status(EntryStatus.SUBMITTED, limit=limit)

    def _get_editable(self, actor: SessionUser, entry_id: int) -> TimeEntry:
        entry = self.get_entry(entry_id)
        self._require_access(actor, entry.user_id)
        if not actor.role.can_review and entry.status == EntryStatus.APPROVED:
            raise AuthorizationError("Approved entries can no longer be changed")
        return entry

    def update_entry(self, *, actor: SessionUser, entry_id: int, changes: EntryChanges) -> TimeEntry:
        entry = self._get_editable(actor, entry_id)

        if changes.hours_from is not None or changes.hours_to is not None:
            hours_from = changes.hours_from if changes.hours_from is not None else entry.hours_from
            hours_to = changes.hours_to if changes.hours_to is not None else entry.hours_to
            # None is recomputed from the range
            hours = changes.hours
        elif changes.hours is not None:
            # a new total replaces the old clock range
            hours, hours_from, hours_to = changes.hours, None, None
        else:
            hours, hours_from, hours_to = entry.hours, entry.hours_from, entry.hours_to

        hours, quantity, hours_from, hours_to = resolve_measure(
            entry.billing_type,
            hours=hours,
            quantity=changes.quantity if changes.quantity is not None else entry.quantity,
            hours_from=hours_from,
            hours_to=hours_to,
        )

        status = entry.status
        if status == EntryStatus.REJECTED and actor.user_id == entry.user_id:
            # the owner fixing a rejected entry resubmits it
            status = EntryStatus.SUBMITTED

        updated = replace(
            entry,
            work_date=changes.work_date or entry.work_date,
            hours=hours,
            quantity=quantity,
            hours_from=hours_from,
            hours_to=hours_to,
            description=optional_text(changes.description) if changes.description is not None else entry.description,
            status=status,
        )
        self._entries.update_entry(updated)
        return self.get_entry(entry.entry_id)

    def delete_entry(self, *, actor: SessionUser, entry_id: int) -> None:
        entry = self._get_editable(actor, entry_id)
        if not self._entries.delete_by_id(entry.entry_id):
            raise ValidationError("Deleting the entry failed")
        logger.info("Entry %s deleted by %s", entry.entry_id, actor.username)

    def approve_entry(self, *, actor: SessionUser, entry_id: int, now: Optional[datetime] = None) -> TimeEntry:
        self._require_reviewer(actor)
        entry = self.get_entry(entry_id)
        self._entries.set_status(
            entry.entry_id,
            status=EntryStatus.APPROVED,
            approved_by=actor.user_id,
            approved_at=now or now_local(),
        )
        logger.info("Entry %s approved by %s", entry.entry_id, actor.username)
        return self.get_entry(entry.entry_id)

    def reject_entry(self, *, actor: SessionUser, entry_id: int) -> TimeEntry:
        self._require_reviewer(actor)
        entry = self.get_entry(entry_id)
        self._entries.set_status(entry.entry_id, status=EntryStatus.REJECTED)
        logger.info("Entry %s rejected by %s", entry.entry_id, actor.username)
        return self.get_entry(entry.entry_id)

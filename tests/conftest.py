from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from timetracker.container import assemble
from timetracker.core.enums import BillingType, ContractType, EntryStatus, Role
from timetracker.entries.model import TimeEntry
from timetracker.main import create_app
from timetracker.projects.model import Project, Task
from timetracker.users.model import User, UserChanges
from timetracker.users.service import SessionUser


class InMemoryUsers:
    def __init__(self, users=()):
        self._by_id: dict[int, User] = {u.user_id: u for u in users}
        self._id = max(self._by_id, default=0)

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.username == username), None)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.email == email), None)

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda u: (u.last_name, u.first_name))

    def create_user(self, user: User) -> int:
        self._id += 1
        self._by_id[self._id] = replace(user, user_id=self._id)
        return self._id

    def update_user(self, user_id: int, changes: UserChanges) -> bool:
        values = {k: v for k, v in vars(changes).items() if v is not None}
        self._by_id[user_id] = replace(self._by_id[user_id], **values)
        return bool(values)

    def set_password(self, user_id: int, *, password_hash: str, change_required: bool) -> bool:
        self._by_id[user_id] = replace(
            self._by_id[user_id], password_hash=password_hash, password_change_required=change_required
        )
        return True

    def delete_by_id(self, user_id: int) -> bool:
        return self._by_id.pop(user_id, None) is not None


class InMemoryProjects:
    def __init__(self, projects=()):
        self._by_id: dict[int, Project] = {p.project_id: p for p in projects}
        self._members: dict[int, list[int]] = {}
        self._id = max(self._by_id, default=0)

    def get_by_id(self, project_id: int) -> Optional[Project]:
        return self._by_id.get(project_id)

    def list_all(self, *, active_only: bool = False):
        items = [p for p in self._by_id.values() if p.is_active or not active_only]
        return sorted(items, key=lambda p: (p.number, p.name))

    def create_project(self, project: Project) -> int:
        self._id += 1
        self._by_id[self._id] = replace(project, project_id=self._id)
        return self._id

    def update_project(self, project: Project) -> bool:
        self._by_id[project.project_id] = project
        return True

    def delete_by_id(self, project_id: int) -> bool:
        self._members.pop(project_id, None)
        return self._by_id.pop(project_id, None) is not None

    def list_member_ids(self, project_id: int):
        return list(self._members.get(project_id, []))

    def replace_members(self, project_id: int, user_ids) -> None:
        self._members[project_id] = sorted(set(user_ids))


class InMemoryTasks:
    def __init__(self, tasks=()):
        self._by_id: dict[int, Task] = {t.task_id: t for t in tasks}
        self._id = max(self._by_id, default=0)

    def get_by_id(self, task_id: int) -> Optional[Task]:
        return self._by_id.get(task_id)

    def list_for_project(self, project_id: int):
        return sorted((t for t in self._by_id.values() if t.project_id == project_id), key=lambda t: t.number)

    def create_task(self, task: Task) -> int:
        self._id += 1
        self._by_id[self._id] = replace(task, task_id=self._id)
        return self._id

    def update_task(self, task: Task) -> bool:
        self._by_id[task.task_id] = task
        return True

    def delete_by_id(self, task_id: int) -> bool:
        return self._by_id.pop(task_id, None) is not None


class InMemoryEntries:
    """Stores raw entries and resolves the joined read fields like the SQL view."""

    def __init__(self, users: InMemoryUsers, projects: InMemoryProjects, tasks: InMemoryTasks):
        self._users = users
        self._projects = projects
        self._tasks = tasks
        self._by_id: dict[int, TimeEntry] = {}
        self._id = 0

    def _read(self, entry: TimeEntry) -> TimeEntry:
        task = self._tasks.get_by_id(entry.task_id) if entry.task_id else None
        project = self._projects.get_by_id(entry.project_id)
        user = self._users.get_by_id(entry.user_id)
        return replace(
            entry,
            task_number=task.number if task else None,
            project_name=project.name if project else None,
            user_name=user.full_name if user else None,
        )

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        entry = self._by_id.get(entry_id)
        return self._read(entry) if entry else None

    def list_for_user_between(self, user_id: int, *, start_date: date, end_date: date):
        items = [
            e for e in self._by_id.values() if e.user_id == user_id and start_date <= e.work_date <= end_date
        ]
        return [self._read(e) for e in sorted(items, key=lambda e: (e.work_date, e.entry_id))]

    def list_recent_for_user(self, user_id: int, limit: int):
        items = sorted(
            (e for e in self._by_id.values() if e.user_id == user_id),
            key=lambda e: (e.work_date, e.entry_id),
            reverse=True,
        )
        return [self._read(e) for e in items[:limit]]

    def list_by_status(self, status: EntryStatus, *, limit: int):
        items = sorted(
            (e for e in self._by_id.values() if e.status == status),
            key=lambda e: (e.work_date, e.entry_id),
            reverse=True,
        )
        return [self._read(e) for e in items[:limit]]

    def create_entry(self, entry: TimeEntry) -> int:
        self._id += 1
        self._by_id[self._id] = replace(entry, entry_id=self._id)
        return self._id

    def update_entry(self, entry: TimeEntry) -> bool:
        self._by_id[entry.entry_id] = entry
        return True

    def set_status(self, entry_id: int, *, status: EntryStatus, approved_by=None, approved_at=None) -> bool:
        self._by_id[entry_id] = replace(
            self._by_id[entry_id], status=status, approved_by=approved_by, approved_at=approved_at
        )
        return True

    def delete_by_id(self, entry_id: int) -> bool:
        return self._by_id.pop(entry_id, None) is not None


PASSWORDS = {
    "director": "Director1!",
    "manager": "Manager1!",
    "worker": "Worker1!",
    "other": "Other123!",
    "gone": "Gone1234!",
}


def _user(user_id: int, username: str, role: Role, **kwargs) -> User:
    return User(
        user_id=user_id,
        username=username,
        email=f"{username}@example.com",
        first_name=username.capitalize(),
        last_name="Tester",
        password_hash=generate_password_hash(PASSWORDS[username]),
        role=role,
        **kwargs,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 15, 10, 0, 0)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers(
        [
            _user(1, "director", Role.DIRECTOR, uop_gross_rate=Decimal("8000")),
            _user(2, "manager", Role.MANAGER, contract_type=ContractType.B2B, b2b_hourly_net_rate=Decimal("100")),
            _user(3, "worker", Role.WORKER, uop_gross_rate=Decimal("4800")),
            _user(4, "other", Role.WORKER, contract_type=ContractType.B2B, b2b_hourly_net_rate=Decimal("80")),
            _user(5, "gone", Role.WORKER, is_active=False),
        ]
    )


@pytest.fixture
def projects_repo() -> InMemoryProjects:
    return InMemoryProjects(
        [
            Project(project_id=1, name="Bridge", number="20031-00", manager_id=2),
            Project(project_id=2, name="Archive", number="19999", is_active=False),
        ]
    )


@pytest.fixture
def tasks_repo() -> InMemoryTasks:
    return InMemoryTasks(
        [
            Task(task_id=1, project_id=1, title="Design", number="20031-A"),
            Task(
                task_id=2,
                project_id=1,
                title="Tiling",
                number="20031-B",
                billing_type=BillingType.UNIT,
                unit_price=Decimal("12.50"),
                unit_name="m2",
            ),
            Task(task_id=3, project_id=1, title="Closed", number="20031-C", is_active=False),
        ]
    )


@pytest.fixture
def entries_repo(users_repo, projects_repo, tasks_repo) -> InMemoryEntries:
    return InMemoryEntries(users_repo, projects_repo, tasks_repo)


@pytest.fixture
def container(users_repo, projects_repo, tasks_repo, entries_repo):
    return assemble(
        users_repo=users_repo,
        projects_repo=projects_repo,
        tasks_repo=tasks_repo,
        entries_repo=entries_repo,
        monthly_hours=160,
        pln_to_uah_rate=Decimal("10.5"),
    )


@pytest.fixture
def director(users_repo) -> SessionUser:
    return SessionUser.from_user(users_repo.get_by_id(1))


@pytest.fixture
def manager(users_repo) -> SessionUser:
    return SessionUser.from_user(users_repo.get_by_id(2))


@pytest.fixture
def worker(users_repo) -> SessionUser:
    return SessionUser.from_user(users_repo.get_by_id(3))


@pytest.fixture
def other_worker(users_repo) -> SessionUser:
    return SessionUser.from_user(users_repo.get_by_id(4))


@pytest.fixture
def app(container):
    app = create_app(container, settings_module="config.testing")
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(username: str, password: Optional[str] = None):
        return client.post(
            "/",
            data={"username": username, "password": password or PASSWORDS[username]},
            follow_redirects=False,
        )

    return _login


@pytest.fixture
def auth_header(client):
    def _header(username: str) -> dict:
        resp = client.post("/api/auth/login", json={"username": username, "password": PASSWORDS[username]})
        assert resp.status_code == 200, resp.get_json()
        return {"Authorization": f"Bearer {resp.get_json()['token']}"}

    return _header

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .core.constants import DEFAULT_MONTHLY_HOURS, DEFAULT_PLN_TO_UAH_RATE
from .database.connection import DBConfig, DatabaseConnection
from .entries.mysql_entry_repository import MySQLTimeEntryRepository
from .entries.repository import TimeEntryRepository
from .entries.service import TimeEntryService
from .month_view.service import MonthViewService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.mysql_task_repository import MySQLTaskRepository
from .projects.repository import ProjectRepository, TaskRepository
from .projects.service import ProjectService
from .reports.currency import CurrencyConverter
from .reports.service import MonthlyReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    projects_repo: ProjectRepository
    tasks_repo: TaskRepository
    entries_repo: TimeEntryRepository

    auth_service: AuthService
    user_service: UserService
    project_service: ProjectService
    entry_service: TimeEntryService
    month_view_service: MonthViewService
    report_service: MonthlyReportService


def assemble(
    *,
    users_repo: UserRepository,
    projects_repo: ProjectRepository,
    tasks_repo: TaskRepository,
    entries_repo: TimeEntryRepository,
    conn: Optional[DatabaseConnection] = None,
    monthly_hours: int = DEFAULT_MONTHLY_HOURS,
    pln_to_uah_rate: Decimal = DEFAULT_PLN_TO_UAH_RATE,
) -> Container:
    """Wire services on top of any repository implementations."""
    user_service = UserService(users_repo)
    entry_service = TimeEntryService(entries_repo, projects_repo, tasks_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        projects_repo=projects_repo,
        tasks_repo=tasks_repo,
        entries_repo=entries_repo,
        auth_service=AuthService(users_repo),
        user_service=user_service,
        project_service=ProjectService(projects_repo, tasks_repo, users_repo),
        entry_service=entry_service,
        month_view_service=MonthViewService(entry_service),
        report_service=MonthlyReportService(
            entry_service,
            user_service,
            converter=CurrencyConverter(pln_to_uah_rate),
            monthly_hours=monthly_hours,
        ),
    )


def build_container(
    *,
    db_config: dict,
    monthly_hours: int = DEFAULT_MONTHLY_HOURS,
    pln_to_uah_rate: Decimal = DEFAULT_PLN_TO_UAH_RATE,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        users_repo=MySQLUserRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        entries_repo=MySQLTimeEntryRepository(conn),
        conn=conn,
        monthly_hours=monthly_hours,
        pln_to_uah_rate=pln_to_uah_rate,
    )

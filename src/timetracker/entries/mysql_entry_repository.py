from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import BillingType, EntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, to_decimal
from .model import TimeEntry
from .repository import TimeEntryRepository

_SELECT = """
    SELECT e.entry_id, e.user_id, e.project_id, e.task_id, e.work_date, e.hours_from, e.hours_to,
           e.hours, e.quantity, e.billing_type, e.unit_name, e.unit_price,
           e.description, e.status, e.approved_by, e.approved_at, t.number AS task_number,
           p.name AS project_name,
           CONCAT(u.first_name, ' ', u.last_name) AS user_name
    FROM time_entries e
    JOIN projects p ON p.project_id = e.project_id
    JOIN users u ON u.user_id = e.user_id
    LEFT JOIN tasks t ON t.task_id = e.task_id
"""


def _row_to_entry(row: dict) -> TimeEntry:
    return TimeEntry(
        entry_id=int(row["entry_id"]),
        user_id=int(row["user_id"]),
        project_id=int(row["project_id"]),
        task_id=row.get("task_id"),
        work_date=row["work_date"],
        hours=to_decimal(row.get("hours")),
        quantity=to_decimal(row.get("quantity")),
        hours_from=normalize_mysql_time(row.get("hours_from")),
        hours_to=normalize_mysql_time(row.get("hours_to")),
        description=row.get("description"),
        status=EntryStatus(row["status"]),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        billing_type=BillingType(row["billing_type"]),
        unit_name=row.get("unit_name"),
        unit_price=to_decimal(row.get("unit_price")),
        user_name=row.get("user_name"),
        project_name=row.get("project_name"),
        task_number=row.get("task_number"),
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.entry_id=%s", (int(entry_id),))
            row = fetchone(cur)
            return _row_to_entry(row) if row else None

    def list_for_user_between(self, user_id: int, *, start_date: date, end_date: date) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE e.user_id=%s AND e.work_date BETWEEN %s AND %s ORDER BY e.work_date, e.entry_id",
                (int(user_id), start_date, end_date),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def list_recent_for_user(self, user_id: int, limit: int) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE e.user_id=%s ORDER BY e.work_date DESC, e.entry_id DESC LIMIT %s",
                (int(user_id), int(limit)),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def list_by_status(self, status: EntryStatus, *, limit: int) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE e.status=%s ORDER BY e.work_date DESC, e.entry_id DESC LIMIT %s",
                (status.value, int(limit)),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def create_entry(self, entry: TimeEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(user_id, project_id, task_id, work_date, hours_from, hours_to,
                                         hours, quantity, billing_type, unit_name, unit_price, description, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.user_id,
                    entry.project_id,
                    entry.task_id,
                    entry.work_date,
                    entry.hours_from,
                    entry.hours_to,
                    entry.hours,
                    entry.quantity,
                    entry.billing_type.value,
                    entry.unit_name,
                    entry.unit_price,
                    entry.description,
                    entry.status.value,
                ),
            )
            return int(cur.lastrowid)

    def update_entry(self, entry: TimeEntry) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET work_date=%s, hours_from=%s, hours_to=%s, hours=%s, quantity=%s, description=%s, status=%s
                WHERE entry_id=%s
                """,
                (
                    entry.work_date,
                    entry.hours_from,
                    entry.hours_to,
                    entry.hours,
                    entry.quantity,
                    entry.description,
                    entry.status.value,
                    entry.entry_id,
                ),
            )
            return cur.rowcount > 0

    def set_status(
        self,
        entry_id: int,
        *,
        status: EntryStatus,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE time_entries SET status=%s, approved_by=%s, approved_at=%s WHERE entry_id=%s",
                (status.value, approved_by, approved_at, int(entry_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_entries WHERE entry_id=%s", (int(entry_id),))
            return cur.rowcount > 0

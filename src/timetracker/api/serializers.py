"""camelCase JSON views of the domain objects."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional

from ..entries.model import TimeEntry
from ..month_view.model import DaySummary, MonthView
from ..projects.model import Project, Task
from ..reports.service import MonthlyReport
from ..users.model import User


def _num(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def user_to_json(user: User) -> dict:
    return {
        "id": user.user_id,
        "username": user.username,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "role": user.role.value,
        "contractType": user.contract_type.value,
        "language": user.language.value,
        "uopGrossRate": _num(user.uop_gross_rate),
        "b2bHourlyNetRate": _num(user.b2b_hourly_net_rate),
        "isActive": user.is_active,
        "passwordChangeRequired": user.password_change_required,
    }


def project_to_json(project: Project) -> dict:
    return {
        "id": project.project_id,
        "name": project.name,
        "number": project.number,
        "description": project.description,
        "managerId": project.manager_id,
        "isActive": project.is_active,
    }


def task_to_json(task: Task) -> dict:
    return {
        "id": task.task_id,
        "projectId": task.project_id,
        "title": task.title,
        "number": task.number,
        "description": task.description,
        "billingType": task.billing_type.value,
        "unitPrice": _num(task.unit_price),
        "unitName": task.unit_name,
        "isActive": task.is_active,
    }


def entry_to_json(entry: TimeEntry) -> dict:
    return {
        "id": entry.entry_id,
        "userId": entry.user_id,
        "projectId": entry.project_id,
        "taskId": entry.task_id,
        "date": _iso(entry.work_date),
        "hoursFrom": _iso(entry.hours_from),
        "hoursTo": _iso(entry.hours_to),
        "totalHours": _num(entry.hours),
        "quantity": _num(entry.quantity),
        "description": entry.description,
        "status": entry.status.value,
        "approvedBy": entry.approved_by,
        "approvedAt": _iso(entry.approved_at),
        "billingType": entry.billing_type.value,
        "unitName": entry.unit_name,
        "userName": entry.user_name,
        "projectName": entry.project_name,
        "taskNumber": entry.task_number,
    }


def day_to_json(day: DaySummary) -> dict:
    return {
        "date": day.key,
        "inMonth": day.in_month,
        "hasEntry": day.has_entry,
        "totalHours": float(day.total_hours),
        "totalQuantity": float(day.total_quantity),
        "status": day.status.value if day.status else None,
        "unitName": day.unit_name,
        "isHoliday": day.is_holiday,
        "label": day.label,
    }


def month_view_to_json(view: MonthView) -> dict:
    return {
        "year": view.year,
        "month": view.month,
        "days": {key: day_to_json(day) for key, day in view.days.items()},
        "weeks": [[day.key for day in week] for week in view.weeks],
        "totalHours": float(view.total_hours),
        "totalQuantity": float(view.total_quantity),
    }


def report_to_json(report: MonthlyReport) -> dict:
    return {
        "userId": report.user_id,
        "userFullName": report.user_full_name,
        "contractType": report.contract_type,
        "year": report.year,
        "month": report.month,
        "currency": report.currency,
        "items": [entry_to_json(e) for e in report.entries],
        "totals": {
            "totalHours": float(report.total_hours),
            "totalQuantity": float(report.total_quantity),
            "hourlyRate": float(report.hourly_rate),
            "labourCost": float(report.labour_cost),
            "unitValue": float(report.unit_value),
            "totalCost": float(report.total_cost),
            "formattedCost": report.formatted_cost,
        },
        "rateInfo": {"plToUahRate": float(report.pln_to_uah_rate), "source": "config"},
    }

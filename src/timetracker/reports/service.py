from __future__ import annotations

import io
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

import pandas as pd

from ..core.constants import DEFAULT_MONTHLY_HOURS
from ..entries.model import TimeEntry
from ..entries.service import TimeEntryService
from ..users.service import SessionUser, UserService
from .calculator.base import LabourCostCalculator
from .calculator.contract_calculators import calculator_for
from .currency import CurrencyConverter, format_currency, normalize_currency


@dataclass(frozen=True)
class MonthlyReport:
    user_id: int
    user_full_name: str
    contract_type: str
    year: int
    month: int
    currency: str
    hourly_rate: Decimal
    total_hours: Decimal
    total_quantity: Decimal
    labour_cost: Decimal
    unit_value: Decimal
    total_cost: Decimal
    formatted_cost: str
    pln_to_uah_rate: Decimal
    entries: list[TimeEntry] = field(default_factory=list)


class MonthlyReportService:
    def __init__(
        self,
        entries: TimeEntryService,
        users: UserService,
        *,
        converter: Optional[CurrencyConverter] = None,
        monthly_hours: int = DEFAULT_MONTHLY_HOURS,
    ):
        self._entries = entries
        self._users = users
        self._converter = converter or CurrencyConverter()
        self._monthly_hours = int(monthly_hours)

    def _calculator(self, contract_type) -> LabourCostCalculator:
        return calculator_for(contract_type, monthly_hours=self._monthly_hours)

    def build(
        self,
        *,
        actor: SessionUser,
        user_id: int,
        year: int,
        month: int,
        currency: str = "PLN",
    ) -> MonthlyReport:
        currency = normalize_currency(currency)
        entries = list(self._entries.list_month(actor=actor, user_id=user_id, year=year, month=month))
        user = self._users.get_user(user_id)

        total_hours = sum((e.value for e in entries if not e.is_unit_based), Decimal("0"))
        total_quantity = sum((e.value for e in entries if e.is_unit_based), Decimal("0"))
        unit_value = sum((e.value * (e.unit_price or Decimal("0")) for e in entries if e.is_unit_based), Decimal("0"))

        calculator = self._calculator(user.contract_type)
        labour_cost = calculator.cost(user, total_hours)
        total_pln = labour_cost + unit_value

        total_cost = self._converter.convert(total_pln, currency)
        return MonthlyReport(
            user_id=user.user_id,
            user_full_name=user.full_name,
            contract_type=user.contract_type.value,
            year=year,
            month=month,
            currency=currency,
            hourly_rate=calculator.hourly_rate(user),
            total_hours=total_hours,
            total_quantity=total_quantity,
            labour_cost=self._converter.convert(labour_cost, currency),
            unit_value=self._converter.convert(unit_value, currency),
            total_cost=total_cost,
            formatted_cost=format_currency(total_cost, currency),
            pln_to_uah_rate=self._converter.pln_to_uah_rate,
            entries=entries,
        )

    @staticmethod
    def to_excel(report: MonthlyReport) -> io.BytesIO:
        """Entries of the report as an .xlsx workbook held in memory."""
        rows = [
            {
                "Date": e.work_date,
                "Project": e.project_name or e.project_id,
                "Task": e.task_number or "",
                "Billing": e.billing_type.value,
                "Hours": float(e.hours) if e.hours is not None else None,
                "Quantity": float(e.quantity) if e.quantity is not None else None,
                "Unit": e.unit_name or "",
                "Status": e.status.value,
                "Description": e.description or "",
            }
            for e in report.entries
        ]
        df = pd.DataFrame(
            rows,
            columns=["Date", "Project", "Task", "Billing", "Hours", "Quantity", "Unit", "Status", "Description"],
        )

        summary = pd.DataFrame(
            [
                ("User", report.user_full_name),
                ("Period", f"{report.year}-{report.month:02d}"),
                ("Contract", report.contract_type),
                ("Total hours", float(report.total_hours)),
                ("Total quantity", float(report.total_quantity)),
                ("Total cost", report.formatted_cost),
            ],
            columns=["Item", "Value"],
        )

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Entries")
            summary.to_excel(writer, index=False, sheet_name="Summary")
        output.seek(0)
        return output

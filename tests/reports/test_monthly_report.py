from datetime import date
from decimal import Decimal

import pandas as pd
import pytest

from timetracker.core.enums import ContractType
from timetracker.core.exceptions import AuthorizationError
from timetracker.entries.model import EntryDraft
from timetracker.reports.calculator.contract_calculators import (
    B2bCostCalculator,
    UopCostCalculator,
    calculator_for,
)


@pytest.fixture
def march_entries(container, worker):
    svc = container.entry_service
    svc.create_entry(actor=worker, draft=EntryDraft(project_id=1, task_id=1, work_date=date(2024, 3, 4), hours=Decimal("8")))
    svc.create_entry(actor=worker, draft=EntryDraft(project_id=1, task_id=1, work_date=date(2024, 3, 5), hours=Decimal("7.5")))
    svc.create_entry(actor=worker, draft=EntryDraft(project_id=1, task_id=2, work_date=date(2024, 3, 5), quantity=Decimal("12")))
    svc.create_entry(actor=worker, draft=EntryDraft(project_id=1, task_id=1, work_date=date(2024, 4, 1), hours=Decimal("8")))


def test_uop_hourly_rate_is_gross_over_monthly_hours(users_repo):
    worker = users_repo.get_by_id(3)

    assert UopCostCalculator(160).hourly_rate(worker) == Decimal("30.00")
    assert UopCostCalculator(168).hourly_rate(worker) == Decimal("28.57")


def test_missing_rate_costs_nothing(users_repo):
    assert UopCostCalculator().hourly_rate(users_repo.get_by_id(5)) == Decimal("0")
    assert B2bCostCalculator().cost(users_repo.get_by_id(5), Decimal("10")) == Decimal("0")


def test_calculator_for_contract_type():
    assert isinstance(calculator_for(ContractType.B2B), B2bCostCalculator)
    assert isinstance(calculator_for(ContractType.UOP), UopCostCalculator)


def test_monthly_report_in_pln(container, worker, march_entries):
    report = container.report_service.build(actor=worker, user_id=worker.user_id, year=2024, month=3)

    assert report.total_hours == Decimal("15.5")
    assert report.total_quantity == Decimal("12")
    assert report.hourly_rate == Decimal("30.00")
    assert report.labour_cost == Decimal("465")
    assert report.unit_value == Decimal("150")
    assert report.total_cost == Decimal("615")
    assert report.formatted_cost == "615,00 zł"
    assert len(report.entries) == 3


def test_monthly_report_in_uah_and_usd(container, worker, march_entries):
    uah = container.report_service.build(actor=worker, user_id=worker.user_id, year=2024, month=3, currency="UAH")
    usd = container.report_service.build(actor=worker, user_id=worker.user_id, year=2024, month=3, currency="USD")

    assert uah.total_cost == Decimal("6457.50")
    assert uah.formatted_cost == "6 457,50 ₴"
    assert usd.total_cost == Decimal("153.75")
    assert usd.formatted_cost == "$153.75"


def test_b2b_report(container, manager, other_worker):
    container.entry_service.create_entry(
        actor=other_worker,
        draft=EntryDraft(project_id=1, work_date=date(2024, 3, 4), hours=Decimal("10")),
    )

    report = container.report_service.build(actor=manager, user_id=other_worker.user_id, year=2024, month=3)

    assert report.contract_type == "B2B"
    assert report.total_cost == Decimal("800")


def test_worker_cannot_see_other_report(container, worker, other_worker):
    with pytest.raises(AuthorizationError):
        container.report_service.build(actor=worker, user_id=other_worker.user_id, year=2024, month=3)


def test_excel_export_has_entries_and_summary(container, worker, march_entries):
    report = container.report_service.build(actor=worker, user_id=worker.user_id, year=2024, month=3)

    sheets = pd.read_excel(container.report_service.to_excel(report), sheet_name=None)

    assert set(sheets) == {"Entries", "Summary"}
    assert len(sheets["Entries"]) == 3
    assert list(sheets["Entries"]["Task"]) == ["20031-A", "20031-A", "20031-B"]

from decimal import Decimal

import pytest

from timetracker.core.exceptions import ValidationError
from timetracker.reports.currency import CurrencyConverter, format_currency, normalize_currency


def test_pln_is_not_converted():
    assert CurrencyConverter().convert(Decimal("100.10"), "PLN") == Decimal("100.10")


def test_uah_uses_configured_rate():
    assert CurrencyConverter(Decimal("10.5")).convert(Decimal("100"), "uah") == Decimal("1050.00")
    assert CurrencyConverter(Decimal("9.87")).convert(Decimal("10.05"), "UAH") == Decimal("99.19")


def test_usd_divides_by_fixed_rate():
    assert CurrencyConverter().convert(Decimal("10.02"), "USD") == Decimal("2.51")


def test_unknown_currency_is_rejected():
    with pytest.raises(ValidationError):
        normalize_currency("EUR")


def test_blank_currency_defaults_to_pln():
    assert normalize_currency(None) == "PLN"


@pytest.mark.parametrize(
    "currency,expected",
    [
        ("PLN", "1 234,56 zł"),
        ("UAH", "1 234,56 ₴"),
        ("USD", "$1,234.56"),
    ],
)
def test_format_currency(currency, expected):
    assert format_currency(Decimal("1234.555"), currency) == expected

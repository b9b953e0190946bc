from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..core.constants import DEFAULT_PLN_TO_UAH_RATE, PLN_PER_USD
from ..core.enums import Language
from ..core.exceptions import ValidationError

SUPPORTED_CURRENCIES = ("PLN", "UAH", "USD")

_CENT = Decimal("0.01")

# currency -> language whose number format it is shown in
_CURRENCY_LANGUAGE = {"PLN": Language.PL, "UAH": Language.UA, "USD": Language.EN}


def normalize_currency(currency: str | None) -> str:
    code = (currency or "PLN").strip().upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValidationError(f"Unsupported currency: {code}")
    return code


class CurrencyConverter:
    """Converts PLN amounts; the UAH rate comes from configuration."""

    def __init__(self, pln_to_uah_rate: Decimal = DEFAULT_PLN_TO_UAH_RATE):
        self._pln_to_uah = Decimal(pln_to_uah_rate)

    @property
    def pln_to_uah_rate(self) -> Decimal:
        return self._pln_to_uah

    def convert(self, amount_pln: Decimal, currency: str) -> Decimal:
        code = normalize_currency(currency)
        if code == "UAH":
            return (amount_pln * self._pln_to_uah).quantize(_CENT, rounding=ROUND_HALF_UP)
        if code == "USD":
            return (amount_pln / PLN_PER_USD).quantize(_CENT, rounding=ROUND_HALF_UP)
        return amount_pln


def _group_thousands(amount: Decimal, *, group_sep: str, decimal_sep: str) -> str:
    text = f"{amount.quantize(_CENT, rounding=ROUND_HALF_UP):,.2f}"
    return text.replace(",", "\0").replace(".", decimal_sep).replace("\0", group_sep)


def format_currency(amount: Decimal, currency: str) -> str:
    """PL '1 234,56 zł', UA '1 234,56 ₴', EN '$1,234.56'."""
    language = _CURRENCY_LANGUAGE[normalize_currency(currency)]
    if language == Language.EN:
        return "$" + _group_thousands(amount, group_sep=",", decimal_sep=".")
    symbol = "₴" if language == Language.UA else "zł"
    return f"{_group_thousands(amount, group_sep=' ', decimal_sep=',')} {symbol}"

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.constants import PASSWORD_MIN_LENGTH, PASSWORD_SPECIAL_CHARS
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_email(value: Optional[str]) -> str:
    email = require_non_empty(value, "Email")
    if not _EMAIL_RE.match(email):
        raise ValidationError("Email should be valid")
    return email


def parse_decimal(value: Any, field_name: str) -> Optional[Decimal]:
    """Parse a form/JSON number; blank means None.

    Accepts a comma as decimal separator since users type "7,5".
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, (int, Decimal)):
        number = Decimal(value)
    elif isinstance(value, float):
        number = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"{field_name} must be a number")
    # NaN and Infinity from any branch
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    return number


def require_positive(value: Optional[Decimal], field_name: str) -> Optional[Decimal]:
    if value is not None and value <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return value


def require_in_range(value: Decimal, field_name: str, low: Decimal, high: Decimal) -> Decimal:
    if value < low or value > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return value


def require_matching(password: str, confirmation: Optional[str]) -> None:
    if password != (confirmation or ""):
        raise ValidationError("Passwords do not match")


def validate_password_strength(password: Optional[str]) -> str:
    require_min_length(password, "Password", PASSWORD_MIN_LENGTH)
    if not re.search(r"[0-9]", password):
        raise ValidationError("Password must contain at least one digit")
    if not re.search(r"[a-zA-Z]", password):
        raise ValidationError("Password must contain at least one letter")
    if not any(ch in PASSWORD_SPECIAL_CHARS for ch in password):
        raise ValidationError(
            f"Password must contain at least one special character ({PASSWORD_SPECIAL_CHARS})"
        )
    return password


def parse_enum(enum_cls, value: Any, field_name: str, *, default=None):
    """Map a submitted string onto an Enum member; blank means default."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        return enum_cls(value.strip() if isinstance(value, str) else value)
    except ValueError:
        raise ValidationError(f"{field_name} is not valid")

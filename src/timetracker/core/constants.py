"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 50

MIN_ENTRY_HOURS = Decimal("0.5")
MAX_ENTRY_HOURS = Decimal("24")

PROJECT_NUMBER_MAX_LENGTH = 12
TASK_SUFFIX_MAX_LENGTH = 5

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARS = "!@#$%^&*()"

DEFAULT_MONTHLY_HOURS = 160
DEFAULT_PLN_TO_UAH_RATE = Decimal("10.5")
PLN_PER_USD = Decimal("4.0")

DEFAULT_UNIT_LABEL = "pcs"

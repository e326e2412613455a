"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_NORMAL_START = "09:00"
DEFAULT_NORMAL_END = "17:00"
DEFAULT_OVERTIME_START = "17:00"
DEFAULT_OVERTIME_END = "22:00"
DEFAULT_NORMAL_RATE = "20.00"
DEFAULT_OVERTIME_RATE = "35.00"

TIMESHEET_PREFIX = "TS"
INVOICE_PREFIX = "INV"
REFERENCE_DIGITS = 6
REFERENCE_MAX_ATTEMPTS = 20

HOURS_QUANTUM = Decimal("0.01")
MONEY_QUANTUM = Decimal("0.01")
MINUTES_PER_DAY = 24 * 60

DEFAULT_SESSION_DAYS = 30

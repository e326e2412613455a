from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ..core.constants import HOURS_QUANTUM, MONEY_QUANTUM


def to_decimal(value: Any, default: Decimal | None = None) -> Decimal:
    """Convert wire/DB values (str, int, float, Decimal, None) into Decimal.

    Floats go through ``str`` so ``0.1`` stays ``0.1`` instead of its binary expansion.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValueError("Missing decimal value")
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid decimal value: {value!r}")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid decimal value: {value!r}")


def round_half_up(value: Decimal, quantum: Decimal = MONEY_QUANTUM) -> Decimal:
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def quantize_hours(value: Decimal) -> Decimal:
    return round_half_up(value, HOURS_QUANTUM)


def quantize_money(value: Decimal) -> Decimal:
    return round_half_up(value, MONEY_QUANTUM)


def format_money(value: Any) -> str:
    """Render a monetary amount with exactly two decimal places."""
    return f"{quantize_money(to_decimal(value, Decimal(0))):.2f}"


def format_hours(value: Any) -> str:
    return f"{quantize_hours(to_decimal(value, Decimal(0))):.2f}"

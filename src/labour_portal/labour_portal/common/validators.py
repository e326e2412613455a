from __future__ import annotations

from decimal import Decimal
from typing import Any

from ..core.exceptions import ValidationError
from .datetime_utils import parse_hhmm
from .money import to_decimal


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_positive_decimal(value: Any, field_name: str) -> Decimal:
    try:
        d = to_decimal(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a valid positive number")
    if not d.is_finite() or d <= 0:
        raise ValidationError(f"{field_name} must be a valid positive number")
    return d


def require_non_negative_decimal(value: Any, field_name: str) -> Decimal:
    try:
        d = to_decimal(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a valid number")
    if not d.is_finite() or d < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return d


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a boolean")
    return value


def require_hhmm(value: str, field_name: str) -> str:
    try:
        parse_hhmm(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a time in HH:MM format")
    return value.strip()


def require_int_id(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} is invalid")
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if v <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return v

from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse an ISO date or datetime string (``2025-01-06`` or ``2025-01-06T00:00:00Z``) into a date."""
    v = (value or "").strip()
    if len(v) > 10 and v[10] in "T ":
        v = v[:10]
    return datetime.strptime(v, "%Y-%m-%d").date()


def is_monday(value: date) -> bool:
    return value.weekday() == 0


def parse_hhmm(value: str) -> int:
    """Parse a zero-padded 24h ``HH:MM`` string into minutes after midnight."""
    v = str(value or "").strip()
    if len(v) != 5 or v[2] != ":" or not (v[:2].isdigit() and v[3:].isdigit()):
        raise ValueError(f"Invalid time string: {value!r}")
    hours = int(v[:2])
    minutes = int(v[3:])
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time string: {value!r}")
    return hours * 60 + minutes


from __future__ import annotations

from typing import Callable, Optional

from ..core.constants import REFERENCE_DIGITS, REFERENCE_MAX_ATTEMPTS
from ..core.exceptions import ReferenceExhaustedError


def format_reference(prefix: str, number: int) -> str:
    return f"{prefix}-{int(number):0{REFERENCE_DIGITS}d}"


def next_reference(
    prefix: str,
    *,
    last_id: Optional[int],
    exists: Callable[[str], bool],
    max_attempts: int = REFERENCE_MAX_ATTEMPTS,
) -> str:
    """Propose ``last_id + 1 + attempt`` until a free reference number is found.

    ``exists`` is evaluated inside the caller's transaction; the column also
    carries a UNIQUE constraint so a concurrent writer fails the insert instead
    of duplicating the number.
    """
    base = int(last_id or 0) + 1
    for attempt in range(max_attempts):
        candidate = format_reference(prefix, base + attempt)
        if not exists(candidate):
            return candidate
    raise ReferenceExhaustedError(
        f"No free {prefix} reference number after {max_attempts} attempts (from {format_reference(prefix, base)})"
    )

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_hhmm
from ..core.constants import DEFAULT_NORMAL_END, DEFAULT_NORMAL_START, DEFAULT_OVERTIME_END
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ShiftWindow:
    """One day's worked period as wall-clock ``HH:MM`` strings (empty = not worked)."""

    start: str = ""
    end: str = ""

    @property
    def is_worked(self) -> bool:
        return bool(self.start) and bool(self.end)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ShiftWindow":
        if not data:
            return cls()
        return cls(start=str(data.get("start") or "").strip(), end=str(data.get("end") or "").strip())

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class WorkPolicy:
    """Working-hours policy used by the hour splitter.

    The overtime window always begins where the normal window ends.
    """

    normal_start: str = DEFAULT_NORMAL_START
    normal_end: str = DEFAULT_NORMAL_END
    overtime_end: str = DEFAULT_OVERTIME_END

    def __post_init__(self):
        try:
            ns = parse_hhmm(self.normal_start)
            ne = parse_hhmm(self.normal_end)
            oe = parse_hhmm(self.overtime_end)
        except (TypeError, ValueError):
            raise ValidationError("Working hours must be times in HH:MM format")
        if not (ns <= ne <= oe):
            raise ValidationError("Working hours must satisfy normal start <= normal end <= overtime end")


@dataclass(frozen=True)
class HourSplit:
    normal_hours: Decimal
    overtime_hours: Decimal

    @property
    def total_hours(self) -> Decimal:
        return self.normal_hours + self.overtime_hours


ZERO_SPLIT = HourSplit(normal_hours=Decimal("0.00"), overtime_hours=Decimal("0.00"))

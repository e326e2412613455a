from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..common.money import format_hours, format_money


@dataclass(frozen=True)
class Project:
    """``total_hours`` is derived: the sum of ``total_hours`` over the project's timesheets."""

    project_id: int
    name: str
    hourly_rate: Decimal
    total_hours: Decimal
    location: str

    def to_dict(self) -> dict:
        return {
            "id": self.project_id,
            "name": self.name,
            "hourlyRate": format_money(self.hourly_rate),
            "totalHours": format_hours(self.total_hours),
            "location": self.location,
        }

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.money import format_hours, format_money
from ..core.enums import WEEKDAYS, TimesheetStatus
from ..payroll.model import ShiftWindow

DailyHours = dict[str, ShiftWindow]


def empty_week() -> DailyHours:
    return {day: ShiftWindow() for day in WEEKDAYS}


def daily_hours_from_json(data: Optional[Mapping[str, Any]]) -> DailyHours:
    """Stored/wire JSON -> DailyHours with all seven weekdays present."""
    week = empty_week()
    for day, value in (data or {}).items():
        if day in week:
            week[day] = ShiftWindow.from_mapping(value)
    return week


def daily_hours_to_json(daily_hours: Mapping[str, ShiftWindow]) -> dict:
    return {day: daily_hours.get(day, ShiftWindow()).to_dict() for day in WEEKDAYS}


@dataclass(frozen=True)
class TimesheetValues:
    """Everything the service computes for a write; totals are already server-side."""

    user_id: int
    week_starting: date
    daily_hours: DailyHours
    normal_hours: Decimal
    normal_rate: Decimal
    overtime_hours: Decimal
    overtime_rate: Decimal
    total_hours: Decimal
    total_cost: Decimal
    status: TimesheetStatus
    project_id: Optional[int]
    notes: Optional[str] = None


@dataclass(frozen=True)
class Timesheet:
    timesheet_id: int
    reference_number: str
    user_id: int
    week_starting: date
    daily_hours: DailyHours
    total_hours: Decimal
    normal_hours: Decimal
    normal_rate: Decimal
    overtime_hours: Decimal
    overtime_rate: Decimal
    total_cost: Decimal
    status: TimesheetStatus
    project_id: Optional[int]
    notes: Optional[str] = None
    username: Optional[str] = field(default=None, compare=False)
    project_name: Optional[str] = field(default=None, compare=False)

    @property
    def is_editable_by_owner(self) -> bool:
        return self.status in (TimesheetStatus.DRAFT, TimesheetStatus.REJECTED)

    def values(self) -> TimesheetValues:
        return TimesheetValues(
            user_id=self.user_id,
            week_starting=self.week_starting,
            daily_hours=dict(self.daily_hours),
            normal_hours=self.normal_hours,
            normal_rate=self.normal_rate,
            overtime_hours=self.overtime_hours,
            overtime_rate=self.overtime_rate,
            total_hours=self.total_hours,
            total_cost=self.total_cost,
            status=self.status,
            project_id=self.project_id,
            notes=self.notes,
        )

    def to_dict(self) -> dict:
        out = {
            "id": self.timesheet_id,
            "referenceNumber": self.reference_number,
            "userId": self.user_id,
            "weekStarting": self.week_starting.isoformat(),
            "dailyHours": daily_hours_to_json(self.daily_hours),
            "totalHours": format_hours(self.total_hours),
            "normalHours": format_hours(self.normal_hours),
            "normalRate": format_money(self.normal_rate),
            "overtimeHours": format_hours(self.overtime_hours),
            "overtimeRate": format_money(self.overtime_rate),
            "totalCost": format_money(self.total_cost),
            "status": self.status.value,
            "projectId": self.project_id,
            "notes": self.notes,
        }
        if self.username is not None:
            out["username"] = self.username
        if self.project_name is not None:
            out["projectName"] = self.project_name
        return out

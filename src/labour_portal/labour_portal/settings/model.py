from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Mapping

from ..common.datetime_utils import parse_hhmm
from ..common.money import format_money
from ..common.validators import require_hhmm, require_positive_decimal
from ..core import constants
from ..core.exceptions import ValidationError
from ..payroll.model import WorkPolicy

# wire name -> attribute
_TIME_FIELDS = {
    "normalStartTime": "normal_start_time",
    "normalEndTime": "normal_end_time",
    "overtimeStartTime": "overtime_start_time",
    "overtimeEndTime": "overtime_end_time",
}
_RATE_FIELDS = {
    "normalRate": "normal_rate",
    "overtimeRate": "overtime_rate",
}


@dataclass(frozen=True)
class WorkSettings:
    """Flat settings object exposed through the settings endpoint."""

    normal_start_time: str = constants.DEFAULT_NORMAL_START
    normal_end_time: str = constants.DEFAULT_NORMAL_END
    overtime_start_time: str = constants.DEFAULT_OVERTIME_START
    overtime_end_time: str = constants.DEFAULT_OVERTIME_END
    normal_rate: Decimal = Decimal(constants.DEFAULT_NORMAL_RATE)
    overtime_rate: Decimal = Decimal(constants.DEFAULT_OVERTIME_RATE)

    def policy(self) -> WorkPolicy:
        return WorkPolicy(
            normal_start=self.normal_start_time,
            normal_end=self.normal_end_time,
            overtime_end=self.overtime_end_time,
        )

    def merged(self, data: Mapping[str, Any]) -> "WorkSettings":
        """Return a copy with the known wire fields from ``data`` applied and validated."""
        changes: dict[str, Any] = {}
        for key, attr in _TIME_FIELDS.items():
            if key in data:
                changes[attr] = require_hhmm(data[key], key)
        for key, attr in _RATE_FIELDS.items():
            if key in data:
                changes[attr] = require_positive_decimal(data[key], key)

        updated = replace(self, **changes)
        updated.validate()
        return updated

    def validate(self) -> None:
        self.policy()
        if parse_hhmm(self.overtime_start_time) < parse_hhmm(self.normal_end_time):
            raise ValidationError("Overtime cannot start before normal hours end")
        if parse_hhmm(self.overtime_start_time) > parse_hhmm(self.overtime_end_time):
            raise ValidationError("Overtime start must not be after overtime end")

    def to_dict(self) -> dict:
        return {
            "normalStartTime": self.normal_start_time,
            "normalEndTime": self.normal_end_time,
            "overtimeStartTime": self.overtime_start_time,
            "overtimeEndTime": self.overtime_end_time,
            "normalRate": format_money(self.normal_rate),
            "overtimeRate": format_money(self.overtime_rate),
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WorkSettings":
        return cls().merged(data)

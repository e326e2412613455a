from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import TimesheetStatus
from .model import Timesheet, TimesheetValues


class TimesheetRepository(Protocol):
    """Timesheet store.

    ``create``/``update``/``delete`` also refresh ``projects.total_hours`` for every
    project they touch, in the same transaction as the timesheet write.

    ``update``/``set_status``/``delete`` raise ``ConflictError`` for an invoiced
    timesheet, checked under the same row lock as the write. ``create`` raises
    ``DuplicateTimesheetError`` when the user already has a timesheet for the week.
    """

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        raise NotImplementedError

    def get_many(self, timesheet_ids: Sequence[int]) -> Sequence[Timesheet]:
        raise NotImplementedError

    def find_for_user_week(self, *, user_id: int, week_starting: date) -> Optional[Timesheet]:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Timesheet]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Timesheet]:
        """Admin listing, joined with the owner's username."""

        raise NotImplementedError

    def create(self, values: TimesheetValues) -> Timesheet:
        """Insert with a fresh ``TS-######`` reference number."""

        raise NotImplementedError

    def update(self, timesheet_id: int, values: TimesheetValues) -> Timesheet:
        raise NotImplementedError

    def set_status(self, timesheet_id: int, status: TimesheetStatus) -> bool:
        raise NotImplementedError

    def delete(self, timesheet_id: int) -> bool:
        raise NotImplementedError

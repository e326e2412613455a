from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import is_monday, parse_iso_date
from ..common.validators import require_hhmm, require_int_id
from ..core.enums import Role, TimesheetStatus
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DuplicateTimesheetError,
    NotFoundError,
    ValidationError,
)
from ..payroll.model import ShiftWindow, WorkPolicy
from ..payroll.service import PayrollService
from ..projects.repository import ProjectRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import DailyHours, Timesheet, TimesheetValues, empty_week
from .repository import TimesheetRepository

log = logging.getLogger(__name__)

OWNER_CREATE_STATUSES = {TimesheetStatus.DRAFT, TimesheetStatus.PENDING}


@dataclass(frozen=True)
class SubmitResult:
    timesheet: Timesheet
    created: bool


def parse_daily_hours(data: Any) -> DailyHours:
    """Validate wire ``dailyHours``; unknown weekdays and malformed times are rejected.

    A day with only one of start/end is kept as-is and contributes zero hours.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("dailyHours must be an object keyed by weekday")

    week = empty_week()
    for day, value in data.items():
        if day not in week:
            raise ValidationError(f"Unknown weekday in dailyHours: {day!r}")
        if value is None:
            continue
        if not isinstance(value, Mapping):
            raise ValidationError(f"dailyHours.{day} must be an object with start and end")

        shift = ShiftWindow.from_mapping(value)
        if shift.start:
            require_hhmm(shift.start, f"{day} start")
        if shift.end:
            require_hhmm(shift.end, f"{day} end")
        week[day] = shift
    return week


def parse_week_starting(value: Any) -> date:
    if isinstance(value, date):
        week_starting = value
    else:
        try:
            week_starting = parse_iso_date(str(value or ""))
        except ValueError:
            raise ValidationError("Invalid date format")
    if not is_monday(week_starting):
        raise ValidationError("Week starting date must be a Monday")
    return week_starting


def _parse_status(value: Any) -> TimesheetStatus:
    try:
        return TimesheetStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid timesheet status: {value!r}")


class TimesheetService:
    """Timesheet aggregation and lifecycle.

    Hours and cost are always recomputed here from ``dailyHours``; totals sent by
    the client are ignored. Rates are read from the owner's current record and
    copied onto the timesheet at that moment.
    """

    def __init__(
        self,
        timesheets: TimesheetRepository,
        users: UserRepository,
        projects: ProjectRepository,
        *,
        payroll: Optional[PayrollService] = None,
    ):
        self._timesheets = timesheets
        self._users = users
        self._projects = projects
        self._payroll = payroll or PayrollService()

    # -------- reads --------
    def get_timesheet(self, *, current_role: Role, current_user_id: int, timesheet_id: int) -> Timesheet:
        ts = self._require(timesheet_id)
        if current_role != Role.ADMIN and ts.user_id != int(current_user_id):
            raise AuthorizationError("You can only view your own timesheets")
        return ts

    def list_timesheets(self, *, current_role: Role, current_user_id: int) -> Sequence[Timesheet]:
        if current_role == Role.ADMIN:
            return self._timesheets.list_all()
        return self._timesheets.list_for_user(int(current_user_id))

    # -------- writes --------
    def compute_values(
        self,
        *,
        owner: User,
        week_starting: date,
        daily_hours: DailyHours,
        policy: WorkPolicy,
        status: TimesheetStatus,
        project_id: Optional[int],
        notes: Optional[str],
    ) -> TimesheetValues:
        totals = self._payroll.timesheet_totals(
            daily_hours,
            policy,
            normal_rate=owner.normal_rate,
            overtime_rate=owner.overtime_rate,
        )
        return TimesheetValues(
            user_id=owner.user_id,
            week_starting=week_starting,
            daily_hours=daily_hours,
            normal_hours=totals.normal_hours,
            normal_rate=totals.normal_rate,
            overtime_hours=totals.overtime_hours,
            overtime_rate=totals.overtime_rate,
            total_hours=totals.total_hours,
            total_cost=totals.total_cost,
            status=status,
            project_id=project_id,
            notes=notes,
        )

    def submit_timesheet(self, *, current_user_id: int, data: Mapping[str, Any], policy: WorkPolicy) -> SubmitResult:
        """Create the caller's timesheet for a week.

        If the caller already has one for that week it must be ``rejected``; it is
        then overwritten in place (same id and reference number). Any other
        existing status is a duplicate submission.
        """
        week_starting = parse_week_starting(data.get("weekStarting"))
        daily_hours = parse_daily_hours(data.get("dailyHours"))
        project_id = self._require_project(data.get("projectId"))
        status = _parse_status(data.get("status") or TimesheetStatus.DRAFT.value)
        if status not in OWNER_CREATE_STATUSES:
            raise ValidationError("A new timesheet can only be saved as draft or pending")
        notes = (data.get("notes") or "").strip() or None

        owner = self._users.get_by_id(int(current_user_id))
        if not owner:
            raise NotFoundError("User not found")

        values = self.compute_values(
            owner=owner,
            week_starting=week_starting,
            daily_hours=daily_hours,
            policy=policy,
            status=status,
            project_id=project_id,
            notes=notes,
        )

        existing = self._timesheets.find_for_user_week(user_id=owner.user_id, week_starting=week_starting)
        if existing:
            if existing.status != TimesheetStatus.REJECTED:
                log.warning(
                    "Duplicate timesheet for user %s week %s (existing %s is %s)",
                    owner.user_id, week_starting, existing.reference_number, existing.status.value,
                )
                raise DuplicateTimesheetError("You have already submitted a timesheet for this week")

            updated = self._timesheets.update(existing.timesheet_id, values)
            log.info("Timesheet %s resubmitted after rejection", updated.reference_number)
            return SubmitResult(timesheet=updated, created=False)

        created = self._timesheets.create(values)
        log.info("Timesheet %s created for user %s", created.reference_number, owner.user_id)
        return SubmitResult(timesheet=created, created=True)

    def update_timesheet(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        timesheet_id: int,
        data: Mapping[str, Any],
        policy: WorkPolicy,
    ) -> Timesheet:
        ts = self._require(timesheet_id)
        is_admin = current_role == Role.ADMIN

        if not is_admin:
            if ts.user_id != int(current_user_id):
                raise AuthorizationError("You can only modify your own timesheets")
            if not ts.is_editable_by_owner:
                raise AuthorizationError("Only draft or rejected timesheets can be modified")
        if ts.status == TimesheetStatus.INVOICED:
            raise ConflictError("Invoiced timesheets change only through their invoice")

        status = ts.status
        if data.get("status"):
            status = _parse_status(data["status"])
            if status == TimesheetStatus.INVOICED:
                raise ValidationError("Timesheets are marked invoiced only by creating an invoice")
            if not is_admin and status not in OWNER_CREATE_STATUSES:
                raise AuthorizationError("Only admins can approve or reject timesheets")

        project_id = ts.project_id
        if "projectId" in data:
            project_id = self._require_project(data.get("projectId"))
        notes = ts.notes
        if "notes" in data:
            notes = (data.get("notes") or "").strip() or None

        if "dailyHours" in data:
            owner = self._users.get_by_id(ts.user_id)
            if not owner:
                raise NotFoundError("User not found")
            values = self.compute_values(
                owner=owner,
                week_starting=ts.week_starting,
                daily_hours=parse_daily_hours(data.get("dailyHours")),
                policy=policy,
                status=status,
                project_id=project_id,
                notes=notes,
            )
        else:
            values = replace(ts.values(), status=status, project_id=project_id, notes=notes)

        updated = self._timesheets.update(ts.timesheet_id, values)
        log.info("Timesheet %s updated (status=%s)", updated.reference_number, updated.status.value)
        return updated

    def submit_for_approval(self, *, current_user_id: int, timesheet_id: int) -> Timesheet:
        ts = self._require(timesheet_id)
        if ts.user_id != int(current_user_id):
            raise AuthorizationError("You can only submit your own timesheets")
        if not ts.is_editable_by_owner:
            raise ConflictError(f"Timesheet {ts.reference_number} is {ts.status.value} and cannot be submitted")
        return self._transition(ts, TimesheetStatus.PENDING)

    def approve(self, *, current_role: Role, timesheet_id: int) -> Timesheet:
        return self._admin_transition(current_role, timesheet_id, TimesheetStatus.APPROVED)

    def reject(self, *, current_role: Role, timesheet_id: int) -> Timesheet:
        return self._admin_transition(current_role, timesheet_id, TimesheetStatus.REJECTED)

    def delete_timesheet(self, *, current_role: Role, timesheet_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete timesheets")
        ts = self._require(timesheet_id)
        if ts.status == TimesheetStatus.INVOICED:
            raise ConflictError(f"Timesheet {ts.reference_number} is invoiced; delete its invoice first")
        if not self._timesheets.delete(ts.timesheet_id):
            raise NotFoundError("Timesheet not found")
        log.info("Timesheet %s deleted", ts.reference_number)

    # -------- helpers --------
    def _admin_transition(self, current_role: Role, timesheet_id: int, target: TimesheetStatus) -> Timesheet:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can approve or reject timesheets")
        ts = self._require(timesheet_id)
        if ts.status == TimesheetStatus.INVOICED:
            raise ConflictError(f"Timesheet {ts.reference_number} is already invoiced")
        return self._transition(ts, target)

    def _transition(self, ts: Timesheet, target: TimesheetStatus) -> Timesheet:
        if not self._timesheets.set_status(ts.timesheet_id, target):
            raise NotFoundError("Timesheet not found")
        log.info("Timesheet %s: %s -> %s", ts.reference_number, ts.status.value, target.value)
        return self._require(ts.timesheet_id)

    def _require(self, timesheet_id: int) -> Timesheet:
        ts = self._timesheets.get_by_id(int(timesheet_id))
        if not ts:
            raise NotFoundError("Timesheet not found")
        return ts

    def _require_project(self, value: Any) -> int:
        if value in (None, ""):
            raise ValidationError("Project is required")
        project_id = require_int_id(value, "Project")
        if not self._projects.get_by_id(project_id):
            raise NotFoundError("Project not found")
        return project_id

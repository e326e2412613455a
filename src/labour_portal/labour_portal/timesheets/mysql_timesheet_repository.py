from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..common.reference import next_reference
from ..core.constants import TIMESHEET_PREFIX
from ..core.enums import TimesheetStatus
from ..core.exceptions import ConflictError, DuplicateTimesheetError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, json_dump, json_load, row_date, row_decimal
from ..projects.mysql_project_repository import recompute_project_hours
from .model import Timesheet, TimesheetValues, daily_hours_from_json, daily_hours_to_json
from .repository import TimesheetRepository

_USER_WEEK_KEY = "uq_timesheets_user_week"

TIMESHEET_COLUMNS = """
    t.id, t.reference_number, t.user_id, t.week_starting, t.daily_hours,
    t.total_hours, t.normal_hours, t.normal_rate, t.overtime_hours, t.overtime_rate,
    t.total_cost, t.status, t.project_id, t.notes
"""


def to_timesheet(row: dict) -> Timesheet:
    return Timesheet(
        timesheet_id=int(row["id"]),
        reference_number=row["reference_number"],
        user_id=int(row["user_id"]),
        week_starting=row_date(row["week_starting"]),
        daily_hours=daily_hours_from_json(json_load(row.get("daily_hours"))),
        total_hours=row_decimal(row.get("total_hours")),
        normal_hours=row_decimal(row.get("normal_hours")),
        normal_rate=row_decimal(row.get("normal_rate")),
        overtime_hours=row_decimal(row.get("overtime_hours")),
        overtime_rate=row_decimal(row.get("overtime_rate")),
        total_cost=row_decimal(row.get("total_cost")),
        status=TimesheetStatus(row["status"]),
        project_id=int(row["project_id"]) if row.get("project_id") is not None else None,
        notes=row.get("notes"),
        username=row.get("username"),
        project_name=row.get("project_name"),
    )


def _next_timesheet_reference(cur) -> str:
    cur.execute("SELECT MAX(id) AS last_id FROM timesheets")
    row = fetchone(cur)

    def exists(ref: str) -> bool:
        cur.execute("SELECT 1 AS hit FROM timesheets WHERE reference_number=%s", (ref,))
        return fetchone(cur) is not None

    return next_reference(TIMESHEET_PREFIX, last_id=row["last_id"] if row else None, exists=exists)


def _lock_writable(cur, timesheet_id: int) -> Optional[dict]:
    """Lock the row for the rest of the transaction; invoiced rows are refused.

    Invoice creation takes the same lock, so a timesheet cannot be invoiced
    between this check and the caller's write.
    """
    cur.execute(
        "SELECT project_id, status, reference_number FROM timesheets WHERE id=%s FOR UPDATE",
        (int(timesheet_id),),
    )
    row = fetchone(cur)
    if row and row["status"] == TimesheetStatus.INVOICED.value:
        raise ConflictError(f"Timesheet {row['reference_number']} is invoiced and changes only through its invoice")
    return row


def _value_params(values: TimesheetValues) -> tuple:
    return (
        json_dump(daily_hours_to_json(values.daily_hours)),
        values.total_hours,
        values.normal_hours,
        values.normal_rate,
        values.overtime_hours,
        values.overtime_rate,
        values.total_cost,
        values.status.value,
        values.project_id,
        values.notes,
    )


class MySQLTimesheetRepository(TimesheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _get(cur, timesheet_id: int) -> Optional[Timesheet]:
        cur.execute(
            f"""
            SELECT {TIMESHEET_COLUMNS}, u.username, p.name AS project_name
            FROM timesheets t
            LEFT JOIN users u ON u.id = t.user_id
            LEFT JOIN projects p ON p.id = t.project_id
            WHERE t.id=%s
            """,
            (int(timesheet_id),),
        )
        row = fetchone(cur)
        return to_timesheet(row) if row else None

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get(cur, timesheet_id)

    def get_many(self, timesheet_ids: Sequence[int]) -> Sequence[Timesheet]:
        ids = [int(i) for i in timesheet_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {TIMESHEET_COLUMNS} FROM timesheets t WHERE t.id IN ({in_clause(ids)})", tuple(ids))
            return [to_timesheet(r) for r in fetchall(cur)]

    def find_for_user_week(self, *, user_id: int, week_starting: date) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {TIMESHEET_COLUMNS}
                FROM timesheets t
                WHERE t.user_id=%s AND DATE(t.week_starting)=%s
                ORDER BY t.id DESC
                LIMIT 1
                """,
                (int(user_id), week_starting),
            )
            row = fetchone(cur)
            return to_timesheet(row) if row else None

    def list_for_user(self, user_id: int) -> Sequence[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {TIMESHEET_COLUMNS}, p.name AS project_name
                FROM timesheets t
                LEFT JOIN projects p ON p.id = t.project_id
                WHERE t.user_id=%s
                ORDER BY t.week_starting DESC, t.id DESC
                """,
                (int(user_id),),
            )
            return [to_timesheet(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {TIMESHEET_COLUMNS}, COALESCE(u.username, 'Unknown User') AS username,
                       p.name AS project_name
                FROM timesheets t
                LEFT JOIN users u ON u.id = t.user_id
                LEFT JOIN projects p ON p.id = t.project_id
                ORDER BY t.week_starting DESC, t.id DESC
                """
            )
            return [to_timesheet(r) for r in fetchall(cur)]

    def create(self, values: TimesheetValues) -> Timesheet:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                reference = _next_timesheet_reference(cur)
                cur.execute(
                    """
                    INSERT INTO timesheets(
                        reference_number, user_id, week_starting, daily_hours,
                        total_hours, normal_hours, normal_rate, overtime_hours, overtime_rate,
                        total_cost, status, project_id, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (reference, int(values.user_id), values.week_starting) + _value_params(values),
                )
                timesheet_id = int(cur.lastrowid)
                if values.project_id is not None:
                    recompute_project_hours(cur, values.project_id)
                created = self._get(cur, timesheet_id)
        except IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY and _USER_WEEK_KEY in str(exc):
                raise DuplicateTimesheetError("You have already submitted a timesheet for this week") from exc
            raise

        if created is None:
            raise NotFoundError("Timesheet not found after insert")
        return created

    def update(self, timesheet_id: int, values: TimesheetValues) -> Timesheet:
        with db_cursor(self._conn_factory) as (_, cur):
            before = _lock_writable(cur, timesheet_id)
            if not before:
                raise NotFoundError("Timesheet not found")

            cur.execute(
                """
                UPDATE timesheets
                SET daily_hours=%s, total_hours=%s, normal_hours=%s, normal_rate=%s,
                    overtime_hours=%s, overtime_rate=%s, total_cost=%s, status=%s,
                    project_id=%s, notes=%s
                WHERE id=%s
                """,
                _value_params(values) + (int(timesheet_id),),
            )

            touched = {values.project_id, before.get("project_id")}
            for project_id in touched:
                if project_id is not None:
                    recompute_project_hours(cur, int(project_id))
            updated = self._get(cur, timesheet_id)

        if updated is None:
            raise NotFoundError("Timesheet not found")
        return updated

    def set_status(self, timesheet_id: int, status: TimesheetStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if not _lock_writable(cur, timesheet_id):
                return False
            cur.execute("UPDATE timesheets SET status=%s WHERE id=%s", (status.value, int(timesheet_id)))
            return True

    def delete(self, timesheet_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            before = _lock_writable(cur, timesheet_id)
            if not before:
                return False
            cur.execute("DELETE FROM timesheets WHERE id=%s", (int(timesheet_id),))
            if before.get("project_id") is not None:
                recompute_project_hours(cur, int(before["project_id"]))
            return True

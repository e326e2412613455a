from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, row_decimal
from .model import Project
from .repository import ProjectRepository

_HAS_TIMESHEETS = "Project still has timesheets and cannot be deleted"


def _to_project(row: dict) -> Project:
    return Project(
        project_id=int(row["id"]),
        name=row["name"],
        hourly_rate=row_decimal(row.get("hourly_rate")),
        total_hours=row_decimal(row.get("total_hours")),
        location=row.get("location") or "",
    )


def recompute_project_hours(cur, project_id: int) -> Decimal:
    """Set ``projects.total_hours`` to the sum over its timesheets, inside the caller's transaction."""
    cur.execute(
        """
        UPDATE projects p
        SET p.total_hours = (
            SELECT COALESCE(SUM(t.total_hours), 0) FROM timesheets t WHERE t.project_id = p.id
        )
        WHERE p.id=%s
        """,
        (int(project_id),),
    )
    cur.execute("SELECT total_hours FROM projects WHERE id=%s", (int(project_id),))
    row = fetchone(cur)
    return row_decimal(row["total_hours"]) if row else Decimal("0")


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, name, hourly_rate, total_hours, location FROM projects WHERE id=%s",
                (int(project_id),),
            )
            row = fetchone(cur)
            return _to_project(row) if row else None

    def list_all(self) -> Sequence[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, hourly_rate, total_hours, location FROM projects ORDER BY name")
            return [_to_project(r) for r in fetchall(cur)]

    def create(self, *, name: str, hourly_rate: Decimal, location: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO projects(name, hourly_rate, total_hours, location) VALUES(%s,%s,0,%s)",
                (name, hourly_rate, location),
            )
            return int(cur.lastrowid)

    def update(self, project_id: int, *, name: str, hourly_rate: Decimal, location: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE projects SET name=%s, hourly_rate=%s, location=%s WHERE id=%s",
                (name, hourly_rate, location, int(project_id)),
            )
            return cur.rowcount > 0

    def delete(self, project_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT id FROM projects WHERE id=%s FOR UPDATE", (int(project_id),))
                if not fetchone(cur):
                    return False
                cur.execute("SELECT COUNT(*) AS n FROM timesheets WHERE project_id=%s", (int(project_id),))
                row = fetchone(cur)
                if row and int(row["n"]) > 0:
                    raise ConflictError(_HAS_TIMESHEETS)
                cur.execute("DELETE FROM projects WHERE id=%s", (int(project_id),))
                return cur.rowcount > 0
        except IntegrityError as exc:
            if exc.errno == errorcode.ER_ROW_IS_REFERENCED_2:
                raise ConflictError(_HAS_TIMESHEETS) from exc
            raise

    def recompute_total_hours(self, project_id: int) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            return recompute_project_hours(cur, project_id)

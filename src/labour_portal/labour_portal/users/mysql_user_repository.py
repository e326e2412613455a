from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import Role, UserType
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, row_decimal
from .model import NewUser, User
from .repository import UserRepository

_OWNS_RECORDS = "User still has timesheets or invoices and cannot be deleted"

_COLUMNS = """
    id, username, password_hash, role, active, normal_rate, overtime_rate,
    email, nino, utr, user_type, phone_number, address
"""


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        active=bool(row.get("active", True)),
        normal_rate=row_decimal(row.get("normal_rate")),
        overtime_rate=row_decimal(row.get("overtime_rate")),
        email=row.get("email"),
        nino=row.get("nino"),
        utr=row.get("utr"),
        user_type=UserType(row["user_type"]) if row.get("user_type") else None,
        phone_number=row.get("phone_number"),
        address=row.get("address"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, user: NewUser) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(
                    username, password_hash, role, active, normal_rate, overtime_rate,
                    email, nino, utr, user_type, phone_number, address
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.username,
                    user.password_hash,
                    user.role.value,
                    1 if user.active else 0,
                    user.normal_rate,
                    user.overtime_rate,
                    user.email,
                    user.nino,
                    user.utr,
                    user.user_type.value if user.user_type else None,
                    user.phone_number,
                    user.address,
                ),
            )
            return int(cur.lastrowid)

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY id")
            return [_to_user(r) for r in fetchall(cur)]

    def count_admins(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE role=%s", (Role.ADMIN.value,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def set_active(self, user_id: int, *, active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET active=%s WHERE id=%s", (1 if active else 0, int(user_id)))
            return cur.rowcount > 0

    def update_rates(self, user_id: int, *, normal_rate: Decimal, overtime_rate: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET normal_rate=%s, overtime_rate=%s WHERE id=%s",
                (normal_rate, overtime_rate, int(user_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT id FROM users WHERE id=%s FOR UPDATE", (int(user_id),))
                if not fetchone(cur):
                    return False
                cur.execute(
                    """
                    SELECT
                        (SELECT COUNT(*) FROM timesheets WHERE user_id=%s) AS timesheets,
                        (SELECT COUNT(*) FROM invoices WHERE user_id=%s) AS invoices
                    """,
                    (int(user_id), int(user_id)),
                )
                owned = fetchone(cur) or {}
                if int(owned.get("timesheets") or 0) or int(owned.get("invoices") or 0):
                    raise ConflictError(_OWNS_RECORDS)
                cur.execute("DELETE FROM users WHERE id=%s", (int(user_id),))
                return cur.rowcount > 0
        except IntegrityError as exc:
            if exc.errno == errorcode.ER_ROW_IS_REFERENCED_2:
                raise ConflictError(_OWNS_RECORDS) from exc
            raise

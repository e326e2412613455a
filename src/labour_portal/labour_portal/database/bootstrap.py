from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from werkzeug.security import generate_password_hash

from .connection import DBConfig, open_connection

log = logging.getLogger(__name__)

_CREATE_DB_OR_USE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def split_sql(sql: str) -> Iterator[str]:
    """Yield the statements of a schema file.

    ``CREATE DATABASE``/``USE`` lines are dropped so the file applies to whatever
    database ``DB_CONFIG`` names. Semicolons inside quoted literals do not split.
    """
    sql = _LINE_COMMENT.sub("", _CREATE_DB_OR_USE.sub("", sql))

    start = 0
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_mapping(db_config)
    conn = open_connection(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    """Create the database if needed and run every statement of ``schema_path`` (idempotent DDL)."""
    ensure_database_exists(db_config)
    statements = list(split_sql(Path(schema_path).read_text(encoding="utf-8")))

    conn = open_connection(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    log.info("Applied %d schema statements from %s", len(statements), schema_path)


def ensure_admin_user(
    db_config: dict,
    *,
    username: str = "admin",
    password: str = "admin",
    email: str = "admin@example.com",
    normal_rate: str = "15.00",
    overtime_rate: str = "20.00",
) -> bool:
    """Create the bootstrap admin account if it is missing. Returns True when created."""
    conn = open_connection(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT id FROM users WHERE username=%s", (username,))
        if cur.fetchone():
            log.debug("Admin user %r already exists", username)
            return False

        cur.execute(
            """
            INSERT INTO users(username, password_hash, role, active, normal_rate, overtime_rate, email)
            VALUES(%s,%s,'admin',1,%s,%s,%s)
            """,
            (username, generate_password_hash(password), normal_rate, overtime_rate, email),
        )
        conn.commit()
        log.info("Admin user %r created", username)
        return True
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = open_connection(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()

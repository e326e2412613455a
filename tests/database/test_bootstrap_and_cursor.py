from __future__ import annotations

import pytest

from src.labour_portal.labour_portal.database.bootstrap import split_sql
from src.labour_portal.labour_portal.database.connection import DBConfig
from src.labour_portal.labour_portal.database.mysql_base import db_cursor, in_clause, json_load


class FakeCursor:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.committed = False
        self.rolled_back = False
        self.closed = False
        self.cursor_obj = FakeCursor()

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self):
        self.conn = FakeConnection()

    def connect(self):
        return self.conn


def test_split_sql_drops_database_lines_and_keeps_quoted_semicolons():
    sql = """
    CREATE DATABASE IF NOT EXISTS labour_portal;
    USE labour_portal;
    -- users
    CREATE TABLE a (x VARCHAR(10) DEFAULT 'a;b');
    CREATE TABLE b (y INT)
    """

    statements = list(split_sql(sql))

    assert statements == ["CREATE TABLE a (x VARCHAR(10) DEFAULT 'a;b')", "CREATE TABLE b (y INT)"]


def test_db_cursor_commits_on_success():
    factory = FakeFactory()
    with db_cursor(factory) as (_, cur):
        assert cur is factory.conn.cursor_obj

    assert factory.conn.committed
    assert not factory.conn.rolled_back
    assert factory.conn.closed
    assert factory.conn.cursor_obj.closed


def test_db_cursor_rolls_back_on_error():
    factory = FakeFactory()
    with pytest.raises(RuntimeError):
        with db_cursor(factory):
            raise RuntimeError("boom")

    assert factory.conn.rolled_back
    assert not factory.conn.committed
    assert factory.conn.closed


def test_helpers():
    assert in_clause([1, 2, 3]) == "%s, %s, %s"
    assert json_load(b'{"monday": {"start": "09:00"}}') == {"monday": {"start": "09:00"}}
    assert DBConfig.from_mapping({"host": "db"}).database == "labour_portal"

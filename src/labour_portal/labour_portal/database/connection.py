from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import mysql.connector
from mysql.connector.constants import ClientFlag

DEFAULT_DATABASE = "labour_portal"


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict; missing keys fall back to local defaults."""
        return cls(
            host=str(data.get("host", "localhost")),
            port=int(data.get("port", 3306)),
            user=str(data.get("user", "root")),
            password=str(data.get("password", "")),
            database=str(data.get("database", DEFAULT_DATABASE)),
        )


def open_connection(config: DBConfig, *, with_database: bool = True, **options):
    kwargs = dict(
        host=config.host,
        port=int(config.port),
        user=config.user,
        password=config.password,
        charset="utf8mb4",
    )
    if with_database:
        kwargs["database"] = config.database
    kwargs.update(options)
    return mysql.connector.connect(**kwargs)


class DatabaseConnection:
    """Process-wide connection factory.

    Every repository call opens its own short-lived connection, and that
    connection carries exactly one transaction (see ``db_cursor``).
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance.config != config:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        # FOUND_ROWS: rowcount reports matched rows, so an UPDATE that changes nothing still counts.
        return open_connection(self._config, autocommit=False, client_flags=[ClientFlag.FOUND_ROWS])

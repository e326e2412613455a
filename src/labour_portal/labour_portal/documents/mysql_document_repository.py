from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Document
from .repository import DocumentRepository

_COLUMNS = "d.id, d.user_id, d.name, d.path, d.approved, d.uploaded_at"


def _to_document(row: dict) -> Document:
    return Document(
        document_id=int(row["id"]),
        user_id=int(row["user_id"]),
        name=row["name"],
        path=row["path"],
        uploaded_at=row.get("uploaded_at") or datetime.now(),
        approved=bool(row.get("approved")),
        username=row.get("username"),
    )


class MySQLDocumentRepository(DocumentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, document_id: int) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM documents d WHERE d.id=%s", (int(document_id),))
            row = fetchone(cur)
            return _to_document(row) if row else None

    def list_for_user(self, user_id: int) -> Sequence[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM documents d WHERE d.user_id=%s ORDER BY d.uploaded_at DESC, d.id DESC",
                (int(user_id),),
            )
            return [_to_document(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, COALESCE(u.username, 'Unknown User') AS username
                FROM documents d
                LEFT JOIN users u ON u.id = d.user_id
                ORDER BY d.uploaded_at DESC, d.id DESC
                """
            )
            return [_to_document(r) for r in fetchall(cur)]

    def create(self, *, user_id: int, name: str, path: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO documents(user_id, name, path, approved) VALUES(%s,%s,%s,0)",
                (int(user_id), name, path),
            )
            return int(cur.lastrowid)

    def set_approved(self, document_id: int, *, approved: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE documents SET approved=%s WHERE id=%s", (1 if approved else 0, int(document_id)))
            return cur.rowcount > 0

    def delete(self, document_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM documents WHERE id=%s", (int(document_id),))
            return cur.rowcount > 0

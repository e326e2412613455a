from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Document


class DocumentRepository(Protocol):
    def get_by_id(self, document_id: int) -> Optional[Document]:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Document]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Document]:
        """Admin listing, joined with the owner's username."""

        raise NotImplementedError

    def create(self, *, user_id: int, name: str, path: str) -> int:
        raise NotImplementedError

    def set_approved(self, document_id: int, *, approved: bool) -> bool:
        raise NotImplementedError

    def delete(self, document_id: int) -> bool:
        raise NotImplementedError

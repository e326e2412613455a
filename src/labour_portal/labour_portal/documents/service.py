from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..common.validators import require_bool, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from .model import Document
from .repository import DocumentRepository

log = logging.getLogger(__name__)


class DocumentService:
    """Upload records for user documents (certificates, ID, insurance).

    Users register and list their own documents; admins see everyone's with the
    owner's username and approve them. An approved document can only be removed
    by an admin.
    """

    def __init__(self, documents: DocumentRepository):
        self._documents = documents

    def list_documents(self, *, current_role: Role, current_user_id: int) -> Sequence[Document]:
        if current_role == Role.ADMIN:
            return self._documents.list_all()
        return self._documents.list_for_user(int(current_user_id))

    def upload_document(self, *, current_user_id: int, data: Mapping[str, Any]) -> Document:
        document_id = self._documents.create(
            user_id=int(current_user_id),
            name=require_non_empty(data.get("name"), "Document name"),
            path=require_non_empty(data.get("path"), "Document path"),
        )
        log.info("Document %s uploaded by user %s", document_id, current_user_id)
        return self._require(document_id)

    def set_approved(self, *, current_role: Role, document_id: int, approved: Any) -> Document:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can approve documents")
        approved = require_bool(approved, "Approved")
        self._require(document_id)
        if not self._documents.set_approved(int(document_id), approved=approved):
            raise NotFoundError("Document not found")
        log.info("Document %s approved=%s", document_id, approved)
        return self._require(document_id)

    def delete_document(self, *, current_role: Role, current_user_id: int, document_id: int) -> None:
        doc = self._require(document_id)
        if current_role != Role.ADMIN:
            if doc.user_id != int(current_user_id):
                raise AuthorizationError("You can only delete your own documents")
            if doc.approved:
                raise ConflictError("Approved documents can only be removed by an admin")
        if not self._documents.delete(doc.document_id):
            raise NotFoundError("Document not found")
        log.info("Document %s deleted", doc.document_id)

    def _require(self, document_id: int) -> Document:
        doc = self._documents.get_by_id(int(document_id))
        if not doc:
            raise NotFoundError("Document not found")
        return doc

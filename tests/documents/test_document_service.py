from __future__ import annotations

import pytest

from src.labour_portal.labour_portal.core.enums import Role
from src.labour_portal.labour_portal.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


def upload(container, user, name="CSCS card", path="uploads/cscs.pdf"):
    return container.document_service.upload_document(
        current_user_id=user.user_id,
        data={"name": name, "path": path},
    )


def test_upload_belongs_to_the_caller(container, worker):
    doc = upload(container, worker)

    assert doc.user_id == worker.user_id
    assert doc.approved is False
    assert doc.to_dict()["uploadedAt"] == "2026-03-02T09:00:00"


@pytest.mark.parametrize("data", [{"name": "", "path": "a.pdf"}, {"name": "CSCS", "path": "  "}, {}])
def test_name_and_path_are_required(container, worker, data):
    with pytest.raises(ValidationError):
        container.document_service.upload_document(current_user_id=worker.user_id, data=data)


def test_listing_is_scoped_by_role(container, admin, worker, make_user):
    other = make_user("other")
    upload(container, worker)
    upload(container, other, name="Insurance")

    mine = container.document_service.list_documents(current_role=Role.CANDIDATE, current_user_id=worker.user_id)
    assert [d.name for d in mine] == ["CSCS card"]

    everything = container.document_service.list_documents(current_role=Role.ADMIN, current_user_id=admin.user_id)
    assert sorted((d.username, d.name) for d in everything) == [("other", "Insurance"), ("worker", "CSCS card")]


def test_owner_deletes_until_approved(container, admin, worker, make_user):
    svc = container.document_service
    first = upload(container, worker)
    second = upload(container, worker, name="Passport")

    with pytest.raises(AuthorizationError):
        svc.delete_document(current_role=Role.CANDIDATE, current_user_id=make_user("other").user_id,
                            document_id=first.document_id)

    svc.delete_document(current_role=Role.CANDIDATE, current_user_id=worker.user_id, document_id=first.document_id)
    with pytest.raises(NotFoundError):
        svc.delete_document(current_role=Role.CANDIDATE, current_user_id=worker.user_id, document_id=first.document_id)

    approved = svc.set_approved(current_role=Role.ADMIN, document_id=second.document_id, approved=True)
    assert approved.approved is True
    with pytest.raises(ConflictError):
        svc.delete_document(current_role=Role.CANDIDATE, current_user_id=worker.user_id, document_id=second.document_id)

    svc.delete_document(current_role=Role.ADMIN, current_user_id=admin.user_id, document_id=second.document_id)
    assert svc.list_documents(current_role=Role.ADMIN, current_user_id=admin.user_id) == []


def test_only_admin_approves(container, worker):
    doc = upload(container, worker)
    with pytest.raises(AuthorizationError):
        container.document_service.set_approved(current_role=Role.CANDIDATE, document_id=doc.document_id, approved=True)
    with pytest.raises(ValidationError):
        container.document_service.set_approved(current_role=Role.ADMIN, document_id=doc.document_id, approved="yes")

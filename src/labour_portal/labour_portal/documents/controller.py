from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_role, current_user_id, json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/documents", endpoint="api_documents")
    @login_required
    def api_documents():
        docs = container.document_service.list_documents(
            current_role=current_role(),
            current_user_id=current_user_id(),
        )
        return jsonify([d.to_dict() for d in docs])

    @app.route("/api/documents", methods=["POST"], endpoint="api_document_upload")
    @login_required
    def api_document_upload():
        doc = container.document_service.upload_document(current_user_id=current_user_id(), data=json_body())
        return jsonify(doc.to_dict()), 201

    @app.route("/api/documents/<int:document_id>", methods=["PATCH"], endpoint="api_document_approve")
    @admin_required
    def api_document_approve(document_id: int):
        doc = container.document_service.set_approved(
            current_role=current_role(),
            document_id=document_id,
            approved=json_body().get("approved"),
        )
        return jsonify(doc.to_dict())

    @app.route("/api/documents/<int:document_id>", methods=["DELETE"], endpoint="api_document_delete")
    @login_required
    def api_document_delete(document_id: int):
        container.document_service.delete_document(
            current_role=current_role(),
            current_user_id=current_user_id(),
            document_id=document_id,
        )
        return jsonify({"message": "Document deleted"})

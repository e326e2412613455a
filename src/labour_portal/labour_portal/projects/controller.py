from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_role, json_body, login_required
from ..common.money import format_hours
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/projects", endpoint="api_projects")
    @login_required
    def api_projects():
        return jsonify([p.to_dict() for p in container.project_service.list_projects()])

    @app.route("/api/projects/<int:project_id>", endpoint="api_project_detail")
    @login_required
    def api_project_detail(project_id: int):
        return jsonify(container.project_service.get_project(project_id).to_dict())

    @app.route("/api/projects", methods=["POST"], endpoint="api_project_create")
    @admin_required
    def api_project_create():
        project = container.project_service.create_project(current_role=current_role(), data=json_body())
        return jsonify(project.to_dict()), 201

    @app.route("/api/projects/<int:project_id>", methods=["PATCH"], endpoint="api_project_update")
    @admin_required
    def api_project_update(project_id: int):
        project = container.project_service.update_project(
            current_role=current_role(),
            project_id=project_id,
            data=json_body(),
        )
        return jsonify(project.to_dict())

    @app.route("/api/projects/<int:project_id>", methods=["DELETE"], endpoint="api_project_delete")
    @admin_required
    def api_project_delete(project_id: int):
        container.project_service.delete_project(current_role=current_role(), project_id=project_id)
        return jsonify({"message": "Project deleted"})

    @app.route(
        "/api/projects/<int:project_id>/recompute-hours",
        methods=["POST"],
        endpoint="api_project_recompute_hours",
    )
    @admin_required
    def api_project_recompute_hours(project_id: int):
        total = container.project_service.recompute_hours(current_role=current_role(), project_id=project_id)
        return jsonify({"id": project_id, "totalHours": format_hours(total)})

from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_role, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/settings", endpoint="api_settings")
    @admin_required
    def api_settings():
        return jsonify(container.settings_service.get(current_role=current_role()).to_dict())

    @app.route("/api/settings", methods=["POST"], endpoint="api_settings_update")
    @admin_required
    def api_settings_update():
        updated = container.settings_service.update(current_role=current_role(), data=json_body())
        return jsonify(updated.to_dict())

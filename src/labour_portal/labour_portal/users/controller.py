from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.http import admin_required, current_role, current_user_id, json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def start_session(user) -> None:
        session.clear()
        session.permanent = True
        session["user_id"] = user.user_id
        session["username"] = user.username
        session["role"] = user.role.value

    @app.route("/api/register", methods=["POST"], endpoint="api_register")
    def api_register():
        settings = container.settings_service.current()
        user = container.auth_service.register(
            json_body(),
            default_normal_rate=settings.normal_rate,
            default_overtime_rate=settings.overtime_rate,
        )
        start_session(user)
        return jsonify(user.to_dict()), 201

    @app.route("/api/login", methods=["POST"], endpoint="api_login")
    def api_login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        start_session(user)
        return jsonify(user.to_dict())

    @app.route("/api/logout", methods=["POST"], endpoint="api_logout")
    def api_logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/user", endpoint="api_current_user")
    @login_required
    def api_current_user():
        user = container.user_service.get_user(
            current_role=current_role(),
            current_user_id=current_user_id(),
            user_id=current_user_id(),
        )
        return jsonify(user.to_dict())

    @app.route("/api/users", endpoint="api_users")
    @admin_required
    def api_users():
        users = container.user_service.list_users(current_role=current_role())
        return jsonify([u.to_dict() for u in users])

    @app.route("/api/users/<int:user_id>", endpoint="api_user_detail")
    @login_required
    def api_user_detail(user_id: int):
        user = container.user_service.get_user(
            current_role=current_role(),
            current_user_id=current_user_id(),
            user_id=user_id,
        )
        return jsonify(user.to_dict())

    @app.route("/api/users/<int:user_id>", methods=["PATCH"], endpoint="api_user_status")
    @admin_required
    def api_user_status(user_id: int):
        data = json_body()
        container.user_service.set_active(current_role=current_role(), user_id=user_id, active=data.get("active"))
        user = container.user_service.get_user(
            current_role=current_role(),
            current_user_id=current_user_id(),
            user_id=user_id,
        )
        return jsonify(user.to_dict())

    @app.route("/api/users/<int:user_id>/rates", methods=["PATCH"], endpoint="api_user_rates")
    @admin_required
    def api_user_rates(user_id: int):
        data = json_body()
        user = container.user_service.update_rates(
            current_role=current_role(),
            user_id=user_id,
            normal_rate=data.get("normalRate"),
            overtime_rate=data.get("overtimeRate"),
        )
        return jsonify(user.to_dict())

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="api_user_delete")
    @admin_required
    def api_user_delete(user_id: int):
        container.user_service.delete_user(
            current_role=current_role(),
            current_user_id=current_user_id(),
            user_id=user_id,
        )
        return jsonify({"message": "User deleted"})

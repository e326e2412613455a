from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_role, current_user_id, json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.timesheet_service

    @app.route("/api/timesheets", endpoint="api_timesheets")
    @login_required
    def api_timesheets():
        items = svc.list_timesheets(current_role=current_role(), current_user_id=current_user_id())
        return jsonify([ts.to_dict() for ts in items])

    @app.route("/api/timesheets/<int:timesheet_id>", endpoint="api_timesheet_detail")
    @login_required
    def api_timesheet_detail(timesheet_id: int):
        ts = svc.get_timesheet(
            current_role=current_role(),
            current_user_id=current_user_id(),
            timesheet_id=timesheet_id,
        )
        return jsonify(ts.to_dict())

    @app.route("/api/timesheets", methods=["POST"], endpoint="api_timesheet_create")
    @login_required
    def api_timesheet_create():
        # One policy snapshot per request.
        result = svc.submit_timesheet(
            current_user_id=current_user_id(),
            data=json_body(),
            policy=container.settings_service.policy(),
        )
        return jsonify(result.timesheet.to_dict()), (201 if result.created else 200)

    @app.route("/api/timesheets/<int:timesheet_id>", methods=["PATCH"], endpoint="api_timesheet_update")
    @login_required
    def api_timesheet_update(timesheet_id: int):
        ts = svc.update_timesheet(
            current_role=current_role(),
            current_user_id=current_user_id(),
            timesheet_id=timesheet_id,
            data=json_body(),
            policy=container.settings_service.policy(),
        )
        return jsonify(ts.to_dict())

    @app.route("/api/timesheets/<int:timesheet_id>/submit", methods=["POST"], endpoint="api_timesheet_submit")
    @login_required
    def api_timesheet_submit(timesheet_id: int):
        ts = svc.submit_for_approval(current_user_id=current_user_id(), timesheet_id=timesheet_id)
        return jsonify(ts.to_dict())

    @app.route("/api/timesheets/<int:timesheet_id>/approve", methods=["POST"], endpoint="api_timesheet_approve")
    @admin_required
    def api_timesheet_approve(timesheet_id: int):
        return jsonify(svc.approve(current_role=current_role(), timesheet_id=timesheet_id).to_dict())

    @app.route("/api/timesheets/<int:timesheet_id>/reject", methods=["POST"], endpoint="api_timesheet_reject")
    @admin_required
    def api_timesheet_reject(timesheet_id: int):
        return jsonify(svc.reject(current_role=current_role(), timesheet_id=timesheet_id).to_dict())

    @app.route("/api/timesheets/<int:timesheet_id>", methods=["DELETE"], endpoint="api_timesheet_delete")
    @admin_required
    def api_timesheet_delete(timesheet_id: int):
        svc.delete_timesheet(current_role=current_role(), timesheet_id=timesheet_id)
        return jsonify({"message": "Timesheet deleted"})

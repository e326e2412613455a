from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_role, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.invoice_service

    @app.route("/api/invoices", endpoint="api_invoices")
    @admin_required
    def api_invoices():
        return jsonify([inv.to_dict() for inv in svc.list_invoices(current_role=current_role())])

    @app.route("/api/invoices/preview", methods=["POST"], endpoint="api_invoice_preview")
    @admin_required
    def api_invoice_preview():
        totals = svc.preview(current_role=current_role(), data=json_body())
        return jsonify(totals.to_dict())

    @app.route("/api/invoices", methods=["POST"], endpoint="api_invoice_create")
    @admin_required
    def api_invoice_create():
        invoice = svc.create_invoice(current_role=current_role(), data=json_body())
        return jsonify(invoice.to_dict()), 201

    @app.route("/api/invoices/<int:invoice_id>", endpoint="api_invoice_detail")
    @admin_required
    def api_invoice_detail(invoice_id: int):
        return jsonify(svc.get_invoice(current_role=current_role(), invoice_id=invoice_id).to_dict())

    @app.route("/api/invoices/<int:invoice_id>", methods=["PATCH"], endpoint="api_invoice_update")
    @admin_required
    def api_invoice_update(invoice_id: int):
        invoice = svc.update_invoice(current_role=current_role(), invoice_id=invoice_id, data=json_body())
        return jsonify(invoice.to_dict())

    @app.route("/api/invoices/<int:invoice_id>", methods=["DELETE"], endpoint="api_invoice_delete")
    @admin_required
    def api_invoice_delete(invoice_id: int):
        reverted = svc.delete_invoice(current_role=current_role(), invoice_id=invoice_id)
        return jsonify({"message": "Invoice deleted", "revertedTimesheetIds": list(reverted)})

    @app.route("/api/invoices/<int:invoice_id>/timesheets", endpoint="api_invoice_timesheets")
    @admin_required
    def api_invoice_timesheets(invoice_id: int):
        items = svc.get_invoice_timesheets(current_role=current_role(), invoice_id=invoice_id)
        return jsonify([ts.to_dict() for ts in items])

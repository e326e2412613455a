from __future__ import annotations

import pytest

from src.labour_portal.labour_portal.main import create_app


@pytest.fixture
def client(monkeypatch, container, admin, worker, project):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def login(client, username, password="secret"):
    res = client.post("/api/login", json={"username": username, "password": password})
    assert res.status_code == 200
    return res.get_json()


def week_payload(project_id, week="2026-03-02"):
    return {
        "weekStarting": week,
        "projectId": project_id,
        "status": "pending",
        "dailyHours": {"monday": {"start": "16:00", "end": "19:00"}},
    }


def test_requires_login(client):
    assert client.get("/api/timesheets").status_code == 401
    assert client.post("/api/login", json={"username": "worker", "password": "nope"}).status_code == 401


def test_candidate_cannot_reach_admin_routes(client):
    login(client, "worker")
    assert client.get("/api/invoices").status_code == 403
    assert client.get("/api/settings").status_code == 403


def test_timesheet_create_then_duplicate(client, project):
    me = login(client, "worker")
    assert me["role"] == "candidate"

    res = client.post("/api/timesheets", json=week_payload(project.project_id))
    assert res.status_code == 201
    body = res.get_json()
    assert body["referenceNumber"] == "TS-000001"
    assert body["normalHours"] == "1.00"
    assert body["overtimeHours"] == "2.00"
    assert body["totalCost"] == "80.00"

    dup = client.post("/api/timesheets", json=week_payload(project.project_id))
    assert dup.status_code == 409


def test_invoice_flow_over_http(client, project):
    login(client, "worker")
    ts_id = client.post("/api/timesheets", json=week_payload(project.project_id)).get_json()["id"]
    other_id = client.post("/api/timesheets", json=week_payload(project.project_id, "2026-03-09")).get_json()["id"]
    client.post("/api/logout")

    login(client, "admin")
    assert client.post(f"/api/timesheets/{ts_id}/approve").status_code == 200

    refused = client.post(
        "/api/invoices",
        json={"userId": 2, "vatRate": 20, "cisRate": 20, "timesheetIds": [ts_id, other_id]},
    )
    assert refused.status_code == 409
    assert refused.get_json()["notApproved"] == ["TS-000002"]

    preview = client.post("/api/invoices/preview", json={"timesheetIds": [ts_id], "vatRate": 20, "cisRate": 20})
    assert preview.get_json()["totalAmount"] == "80.00"

    created = client.post("/api/invoices", json={"userId": 2, "vatRate": 20, "cisRate": 20, "timesheetIds": [ts_id]})
    assert created.status_code == 201
    invoice = created.get_json()
    assert invoice["referenceNumber"] == "INV-000001"
    assert invoice["vatAmount"] == "16.00"

    linked = client.get(f"/api/invoices/{invoice['id']}/timesheets").get_json()
    assert [t["status"] for t in linked] == ["invoiced"]

    deleted = client.delete(f"/api/invoices/{invoice['id']}")
    assert deleted.get_json()["revertedTimesheetIds"] == [ts_id]
    assert client.get(f"/api/timesheets/{ts_id}").get_json()["status"] == "approved"


def test_settings_round_trip(client):
    login(client, "admin")
    res = client.post("/api/settings", json={"overtimeEndTime": "23:00"})
    assert res.status_code == 200
    assert client.get("/api/settings").get_json()["overtimeEndTime"] == "23:00"

    bad = client.post("/api/settings", json={"normalStartTime": "25:00"})
    assert bad.status_code == 400


def test_unknown_timesheet_is_404(client):
    login(client, "admin")
    assert client.get("/api/timesheets/999").status_code == 404


def test_documents_over_http(client):
    assert client.get("/api/documents").status_code == 401

    login(client, "worker")
    created = client.post("/api/documents", json={"name": "CSCS card", "path": "uploads/cscs.pdf"})
    assert created.status_code == 201
    doc = created.get_json()
    assert doc["userId"] == 2
    assert doc["approved"] is False
    assert client.post("/api/documents", json={"name": "No path"}).status_code == 400
    assert client.patch(f"/api/documents/{doc['id']}", json={"approved": True}).status_code == 403
    client.post("/api/logout")

    login(client, "admin")
    listed = client.get("/api/documents").get_json()
    assert [(d["username"], d["name"]) for d in listed] == [("worker", "CSCS card")]
    assert client.patch(f"/api/documents/{doc['id']}", json={"approved": True}).get_json()["approved"] is True
    assert client.delete(f"/api/documents/{doc['id']}").status_code == 200
    assert client.delete(f"/api/documents/{doc['id']}").status_code == 404

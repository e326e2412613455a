from __future__ import annotations

from decimal import Decimal

import pytest

from src.labour_portal.labour_portal.core.enums import InvoiceStatus, Role, TimesheetStatus
from src.labour_portal.labour_portal.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvoiceEligibilityError,
    NotFoundError,
    ValidationError,
)
from src.labour_portal.labour_portal.payroll.model import WorkPolicy

POLICY = WorkPolicy()


def make_timesheet(container, user, project, week, *, status=None):
    ts = container.timesheet_service.submit_timesheet(
        current_user_id=user.user_id,
        data={
            "weekStarting": week,
            "projectId": project.project_id,
            "dailyHours": {
                "monday": {"start": "09:00", "end": "17:00"},
                "friday": {"start": "17:00", "end": "19:00"},
            },
            "status": "pending",
        },
        policy=POLICY,
    ).timesheet
    if status == TimesheetStatus.APPROVED:
        ts = container.timesheet_service.approve(current_role=Role.ADMIN, timesheet_id=ts.timesheet_id)
    return ts


@pytest.fixture
def approved_pair(container, worker, project):
    return [
        make_timesheet(container, worker, project, "2026-03-02", status=TimesheetStatus.APPROVED),
        make_timesheet(container, worker, project, "2026-03-09", status=TimesheetStatus.APPROVED),
    ]


def create(container, user, ids, **extra):
    data = {"userId": user.user_id, "vatRate": "20", "cisRate": "20", "timesheetIds": ids}
    data.update(extra)
    return container.invoice_service.create_invoice(current_role=Role.ADMIN, data=data)


def test_create_invoice_recomputes_totals_and_flips_status(container, store, worker, approved_pair):
    ids = [ts.timesheet_id for ts in approved_pair]

    invoice = create(container, worker, ids, subtotal="1", totalAmount="1")

    # Each week: 8h normal * 20 + 2h overtime * 30 = 220.
    assert invoice.reference_number == "INV-000001"
    assert invoice.subtotal == Decimal("440.00")
    assert invoice.total_amount == Decimal("440.00")
    assert invoice.normal_hours == Decimal("16.00")
    assert invoice.overtime_hours == Decimal("4.00")
    assert invoice.normal_rate == Decimal("20.00")
    assert invoice.status == InvoiceStatus.PENDING
    assert all(store.timesheets[i].status == TimesheetStatus.INVOICED for i in ids)
    assert store.invoice_links[invoice.invoice_id] == ids

    out = invoice.to_dict()
    assert out["vatAmount"] == "88.00"
    assert out["cisAmount"] == "88.00"
    assert out["totalAmount"] == "440.00"


def test_mixed_batch_fails_without_any_change(container, store, worker, project):
    approved = make_timesheet(container, worker, project, "2026-03-02", status=TimesheetStatus.APPROVED)
    pending = make_timesheet(container, worker, project, "2026-03-09")

    with pytest.raises(InvoiceEligibilityError) as excinfo:
        create(container, worker, [approved.timesheet_id, pending.timesheet_id])

    assert excinfo.value.not_approved == [pending.reference_number]
    assert store.timesheets[approved.timesheet_id].status == TimesheetStatus.APPROVED
    assert store.timesheets[pending.timesheet_id].status == TimesheetStatus.PENDING
    assert store.invoices == {}
    assert store.invoice_links == {}


def test_error_names_every_offending_timesheet(container, worker, approved_pair):
    first, second = approved_pair
    create(container, worker, [first.timesheet_id])

    with pytest.raises(InvoiceEligibilityError) as excinfo:
        create(container, worker, [first.timesheet_id, second.timesheet_id, 999])

    err = excinfo.value
    assert err.missing_ids == [999]
    assert err.already_invoiced == [first.reference_number]
    assert err.not_approved == []
    assert err.to_dict()["alreadyInvoiced"] == [first.reference_number]


def test_empty_batch_is_rejected(container, worker):
    with pytest.raises(ValidationError):
        create(container, worker, [])


def test_unknown_user_is_rejected(container, worker, approved_pair):
    with pytest.raises(NotFoundError):
        container.invoice_service.create_invoice(
            current_role=Role.ADMIN,
            data={"userId": 999, "timesheetIds": [approved_pair[0].timesheet_id]},
        )


def test_negative_vat_rate_is_rejected(container, worker, approved_pair):
    with pytest.raises(ValidationError):
        create(container, worker, [approved_pair[0].timesheet_id], vatRate="-1")


def test_duplicate_ids_are_billed_once(container, store, worker, approved_pair):
    first = approved_pair[0]

    invoice = create(container, worker, [first.timesheet_id, first.timesheet_id])

    assert invoice.subtotal == Decimal("220.00")
    assert store.invoice_links[invoice.invoice_id] == [first.timesheet_id]


def test_rate_snapshot_is_empty_when_rates_differ(container, store, admin, worker, project):
    first = make_timesheet(container, worker, project, "2026-03-02", status=TimesheetStatus.APPROVED)
    container.user_service.update_rates(
        current_role=Role.ADMIN, user_id=worker.user_id, normal_rate="25", overtime_rate="30"
    )
    second = make_timesheet(container, worker, project, "2026-03-09", status=TimesheetStatus.APPROVED)

    invoice = create(container, worker, [first.timesheet_id, second.timesheet_id])

    assert invoice.normal_rate is None
    assert invoice.overtime_rate == Decimal("30.00")
    assert invoice.subtotal == Decimal("480.00")


def test_delete_invoice_reverts_timesheets_to_approved(container, store, worker, approved_pair):
    ids = [ts.timesheet_id for ts in approved_pair]
    invoice = create(container, worker, ids)

    reverted = container.invoice_service.delete_invoice(current_role=Role.ADMIN, invoice_id=invoice.invoice_id)

    assert list(reverted) == ids
    assert all(store.timesheets[i].status == TimesheetStatus.APPROVED for i in ids)
    assert store.invoices == {}
    # The same timesheets can be billed again.
    assert create(container, worker, ids).reference_number == "INV-000002"


def test_invoiced_timesheet_is_locked(container, admin, worker, approved_pair):
    ts = approved_pair[0]
    create(container, worker, [ts.timesheet_id])

    with pytest.raises(ConflictError):
        container.timesheet_service.reject(current_role=Role.ADMIN, timesheet_id=ts.timesheet_id)


def test_preview_matches_created_invoice(container, worker, approved_pair):
    ids = [ts.timesheet_id for ts in approved_pair]

    preview = container.invoice_service.preview(
        current_role=Role.ADMIN,
        data={"timesheetIds": ids, "vatRate": "20", "cisRate": "20"},
    )
    invoice = create(container, worker, ids)

    assert preview.subtotal == invoice.subtotal
    assert preview.total_amount == invoice.total_amount


def test_update_invoice_status_and_notes(container, worker, approved_pair):
    invoice = create(container, worker, [approved_pair[0].timesheet_id])

    updated = container.invoice_service.update_invoice(
        current_role=Role.ADMIN,
        invoice_id=invoice.invoice_id,
        data={"status": "paid", "notes": "BACS 12/03"},
    )
    assert updated.status == InvoiceStatus.PAID
    assert updated.notes == "BACS 12/03"

    with pytest.raises(ValidationError):
        container.invoice_service.update_invoice(
            current_role=Role.ADMIN,
            invoice_id=invoice.invoice_id,
            data={"status": "cancelled"},
        )


def test_invoice_timesheets_listing(container, worker, approved_pair):
    ids = [ts.timesheet_id for ts in approved_pair]
    invoice = create(container, worker, ids)

    linked = container.invoice_service.get_invoice_timesheets(current_role=Role.ADMIN, invoice_id=invoice.invoice_id)

    assert [ts.timesheet_id for ts in linked] == ids


def test_non_admin_cannot_touch_invoices(container, worker, approved_pair):
    with pytest.raises(AuthorizationError):
        container.invoice_service.create_invoice(
            current_role=Role.CANDIDATE,
            data={"userId": worker.user_id, "timesheetIds": [approved_pair[0].timesheet_id]},
        )
    with pytest.raises(AuthorizationError):
        container.invoice_service.list_invoices(current_role=Role.CLIENT)


def test_totals_come_from_the_rows_that_get_billed(container, store, admin, worker, approved_pair, monkeypatch):
    ids = [ts.timesheet_id for ts in approved_pair]
    repo = container.invoices_repo
    original = repo.create_with_timesheets

    def edit_first(timesheet_ids, build):
        # An admin shortens the first week after the request was parsed.
        container.timesheet_service.update_timesheet(
            current_role=Role.ADMIN,
            current_user_id=admin.user_id,
            timesheet_id=ids[0],
            data={"dailyHours": {"monday": {"start": "09:00", "end": "10:00"}}},
            policy=POLICY,
        )
        return original(timesheet_ids, build)

    monkeypatch.setattr(repo, "create_with_timesheets", edit_first)

    invoice = create(container, worker, ids)

    billed = sum((store.timesheets[i].total_cost for i in ids), Decimal("0"))
    assert billed == Decimal("240.00")
    assert invoice.subtotal == billed
    assert invoice.normal_hours == Decimal("9.00")
    assert invoice.overtime_hours == Decimal("2.00")

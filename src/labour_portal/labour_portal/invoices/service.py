from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import require_int_id, require_non_negative_decimal
from ..core.enums import InvoiceStatus, Role
from ..core.exceptions import AuthorizationError, InvoiceEligibilityError, NotFoundError, ValidationError
from ..payroll.service import PayrollService
from ..payroll.totals import InvoiceTotals
from ..timesheets.model import Timesheet
from ..timesheets.repository import TimesheetRepository
from ..users.repository import UserRepository
from .model import Invoice, NewInvoice
from .repository import InvoiceRepository

log = logging.getLogger(__name__)


def parse_timesheet_ids(value: Any) -> list[int]:
    """Non-empty list of ids, duplicates dropped, request order kept."""
    if not isinstance(value, (list, tuple)) or not value:
        raise ValidationError("At least one timesheet must be selected")
    ids: list[int] = []
    for raw in value:
        timesheet_id = require_int_id(raw, "Timesheet id")
        if timesheet_id not in ids:
            ids.append(timesheet_id)
    return ids


def _parse_invoice_status(value: Any) -> InvoiceStatus:
    try:
        return InvoiceStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid invoice status: {value!r}")


def _uniform_rate(values: Sequence[Decimal]) -> Optional[Decimal]:
    return values[0] if values and all(v == values[0] for v in values) else None


class InvoiceService:
    """Invoice aggregation over approved timesheets.

    Totals are always recomputed from the stored timesheets; any subtotal or total
    sent by the client is ignored.
    """

    def __init__(
        self,
        invoices: InvoiceRepository,
        timesheets: TimesheetRepository,
        users: UserRepository,
        *,
        payroll: Optional[PayrollService] = None,
    ):
        self._invoices = invoices
        self._timesheets = timesheets
        self._users = users
        self._payroll = payroll or PayrollService()

    def list_invoices(self, *, current_role: Role) -> Sequence[Invoice]:
        self._require_admin(current_role)
        return self._invoices.list_all()

    def get_invoice(self, *, current_role: Role, invoice_id: int) -> Invoice:
        self._require_admin(current_role)
        return self._require(invoice_id)

    def get_invoice_timesheets(self, *, current_role: Role, invoice_id: int) -> Sequence[Timesheet]:
        self._require_admin(current_role)
        self._require(invoice_id)
        return self._invoices.list_timesheets(int(invoice_id))

    def preview(self, *, current_role: Role, data: Mapping[str, Any]) -> InvoiceTotals:
        """Financials for a selection of timesheets, without persisting anything."""
        self._require_admin(current_role)
        ids = parse_timesheet_ids(data.get("timesheetIds"))
        vat_rate, cis_rate = self._parse_rates(data)

        found = self._timesheets.get_many(ids)
        missing = sorted(set(ids) - {ts.timesheet_id for ts in found})
        if missing:
            raise NotFoundError(f"Timesheets not found: {', '.join(str(i) for i in missing)}")

        return self._payroll.invoice_totals(found, vat_rate=vat_rate, cis_rate=cis_rate).rounded()

    def create_invoice(self, *, current_role: Role, data: Mapping[str, Any]) -> Invoice:
        """Bill a set of approved timesheets; all of them are invoiced or none are."""
        self._require_admin(current_role)

        user_id = require_int_id(data.get("userId"), "User")
        if not self._users.get_by_id(user_id):
            raise NotFoundError("User not found")
        vat_rate, cis_rate = self._parse_rates(data)
        ids = parse_timesheet_ids(data.get("timesheetIds"))
        notes = (data.get("notes") or "").strip() or None

        def build(locked: Sequence[Timesheet]) -> NewInvoice:
            # Called by the repository with the rows it holds locked.
            totals = self._payroll.invoice_totals(locked, vat_rate=vat_rate, cis_rate=cis_rate).rounded()
            return NewInvoice(
                user_id=user_id,
                subtotal=totals.subtotal,
                vat_rate=vat_rate,
                cis_rate=cis_rate,
                total_amount=totals.total_amount,
                normal_hours=totals.normal_hours,
                overtime_hours=totals.overtime_hours,
                normal_rate=_uniform_rate([ts.normal_rate for ts in locked]),
                overtime_rate=_uniform_rate([ts.overtime_rate for ts in locked]),
                notes=notes,
            )

        try:
            created = self._invoices.create_with_timesheets(ids, build)
        except InvoiceEligibilityError as exc:
            log.warning("Invoice for user %s refused: %s", user_id, exc)
            raise
        log.info(
            "Invoice %s created for user %s over %d timesheet(s), total %s",
            created.reference_number, user_id, len(ids), created.total_amount,
        )
        return created

    def update_invoice(self, *, current_role: Role, invoice_id: int, data: Mapping[str, Any]) -> Invoice:
        self._require_admin(current_role)
        current = self._require(invoice_id)

        status = current.status
        if "status" in data:
            status = _parse_invoice_status(data.get("status"))
        notes = current.notes
        if "notes" in data:
            notes = (data.get("notes") or "").strip() or None

        if not self._invoices.update(current.invoice_id, status=status, notes=notes):
            raise NotFoundError("Invoice not found")
        log.info("Invoice %s updated (status=%s)", current.reference_number, status.value)
        return self._require(current.invoice_id)

    def delete_invoice(self, *, current_role: Role, invoice_id: int) -> Sequence[int]:
        """Delete the invoice and put its timesheets back to approved."""
        self._require_admin(current_role)
        current = self._require(invoice_id)
        reverted = self._invoices.delete_and_revert(current.invoice_id)
        log.info("Invoice %s deleted; timesheets %s reverted to approved", current.reference_number, list(reverted))
        return reverted

    # -------- helpers --------
    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can manage invoices")

    @staticmethod
    def _parse_rates(data: Mapping[str, Any]) -> tuple[Decimal, Decimal]:
        vat_rate = require_non_negative_decimal(data.get("vatRate", 0), "VAT rate")
        cis_rate = require_non_negative_decimal(data.get("cisRate", 0), "CIS rate")
        return vat_rate, cis_rate

    def _require(self, invoice_id: int) -> Invoice:
        invoice = self._invoices.get_by_id(int(invoice_id))
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

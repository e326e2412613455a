from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import InvoiceStatus
from ..timesheets.model import Timesheet
from .model import Invoice, NewInvoice


class InvoiceRepository(Protocol):
    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Invoice]:
        """Invoices joined with the billed user's username."""

        raise NotImplementedError

    def list_timesheets(self, invoice_id: int) -> Sequence[Timesheet]:
        """Linked timesheets with username and project name."""

        raise NotImplementedError

    def create_with_timesheets(
        self,
        timesheet_ids: Sequence[int],
        build: Callable[[Sequence[Timesheet]], NewInvoice],
    ) -> Invoice:
        """Atomically: lock and check the timesheets, call ``build`` with the
        locked rows to get the invoice amounts, insert the invoice with a fresh
        ``INV-######`` reference, insert one join row per timesheet and mark each
        timesheet invoiced. Raises ``InvoiceEligibilityError`` and writes nothing
        if any timesheet is missing or not approved.
        """

        raise NotImplementedError

    def update(self, invoice_id: int, *, status: InvoiceStatus, notes: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_and_revert(self, invoice_id: int) -> Sequence[int]:
        """Atomically set linked timesheets back to approved, drop join rows and the
        invoice. Returns the reverted timesheet ids.
        """

        raise NotImplementedError

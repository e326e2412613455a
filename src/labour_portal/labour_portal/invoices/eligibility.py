from __future__ import annotations

from typing import Iterable, Sequence

from ..core.enums import TimesheetStatus
from ..core.exceptions import InvoiceEligibilityError
from ..timesheets.model import Timesheet


def check_invoice_batch(requested_ids: Sequence[int], found: Iterable[Timesheet]) -> None:
    """Raise ``InvoiceEligibilityError`` naming every timesheet that cannot be invoiced.

    Partitions are disjoint: missing ids, already-invoiced reference numbers, and
    reference numbers in any other non-approved status.
    """
    by_id = {ts.timesheet_id: ts for ts in found}

    missing: list[int] = []
    not_approved: list[str] = []
    already_invoiced: list[str] = []
    for timesheet_id in requested_ids:
        ts = by_id.get(int(timesheet_id))
        if ts is None:
            missing.append(int(timesheet_id))
        elif ts.status == TimesheetStatus.INVOICED:
            already_invoiced.append(ts.reference_number)
        elif ts.status != TimesheetStatus.APPROVED:
            not_approved.append(ts.reference_number)

    if missing or not_approved or already_invoiced:
        raise InvoiceEligibilityError(
            missing_ids=missing,
            not_approved=not_approved,
            already_invoiced=already_invoiced,
        )

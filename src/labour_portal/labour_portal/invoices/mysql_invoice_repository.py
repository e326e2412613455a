from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.reference import next_reference
from ..core.constants import INVOICE_PREFIX
from ..core.enums import InvoiceStatus, TimesheetStatus
from ..core.exceptions import ConflictError, InvoiceEligibilityError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, row_decimal
from ..timesheets.model import Timesheet
from ..timesheets.mysql_timesheet_repository import TIMESHEET_COLUMNS, to_timesheet
from .eligibility import check_invoice_batch
from .model import Invoice, NewInvoice
from .repository import InvoiceRepository

_INVOICE_COLUMNS = """
    i.id, i.reference_number, i.user_id, i.subtotal, i.vat_rate, i.cis_rate,
    i.total_amount, i.normal_hours, i.overtime_hours, i.normal_rate, i.overtime_rate,
    i.status, i.created_at, i.notes
"""


def _optional_decimal(value):
    return row_decimal(value) if value is not None else None


def _to_invoice(row: dict) -> Invoice:
    return Invoice(
        invoice_id=int(row["id"]),
        reference_number=row["reference_number"],
        user_id=int(row["user_id"]),
        subtotal=row_decimal(row.get("subtotal")),
        vat_rate=row_decimal(row.get("vat_rate")),
        cis_rate=row_decimal(row.get("cis_rate")),
        total_amount=row_decimal(row.get("total_amount")),
        normal_hours=row_decimal(row.get("normal_hours")),
        overtime_hours=row_decimal(row.get("overtime_hours")),
        normal_rate=_optional_decimal(row.get("normal_rate")),
        overtime_rate=_optional_decimal(row.get("overtime_rate")),
        status=InvoiceStatus(row["status"]),
        created_at=row.get("created_at") or datetime.now(),
        notes=row.get("notes"),
        username=row.get("username"),
    )


def _next_invoice_reference(cur) -> str:
    cur.execute("SELECT MAX(id) AS last_id FROM invoices")
    row = fetchone(cur)

    def exists(ref: str) -> bool:
        cur.execute("SELECT 1 AS hit FROM invoices WHERE reference_number=%s", (ref,))
        return fetchone(cur) is not None

    return next_reference(INVOICE_PREFIX, last_id=row["last_id"] if row else None, exists=exists)


def _raise_for_unflipped(cur, ids: Sequence[int]) -> None:
    """Report the timesheets the conditional status flip skipped.

    Runs inside the invoice transaction, so rows flipped by it already read as
    invoiced; anything else was not approved when the flip ran.
    """
    cur.execute(
        f"SELECT t.id, t.reference_number, t.status FROM timesheets t WHERE t.id IN ({in_clause(ids)})",
        tuple(ids),
    )
    rows = fetchall(cur)
    found = {int(r["id"]) for r in rows}
    missing = [i for i in ids if i not in found]
    skipped = [r["reference_number"] for r in rows if r["status"] != TimesheetStatus.INVOICED.value]
    if missing or skipped:
        raise InvoiceEligibilityError(missing_ids=missing, not_approved=skipped)
    raise ConflictError("Timesheets changed while the invoice was being created")


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _get(cur, invoice_id: int) -> Optional[Invoice]:
        cur.execute(
            f"""
            SELECT {_INVOICE_COLUMNS}, u.username
            FROM invoices i
            LEFT JOIN users u ON u.id = i.user_id
            WHERE i.id=%s
            """,
            (int(invoice_id),),
        )
        row = fetchone(cur)
        return _to_invoice(row) if row else None

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get(cur, invoice_id)

    def list_all(self) -> Sequence[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_INVOICE_COLUMNS}, COALESCE(u.username, 'Unknown User') AS username
                FROM invoices i
                LEFT JOIN users u ON u.id = i.user_id
                ORDER BY i.created_at DESC, i.id DESC
                """
            )
            return [_to_invoice(r) for r in fetchall(cur)]

    def list_timesheets(self, invoice_id: int) -> Sequence[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {TIMESHEET_COLUMNS}, COALESCE(u.username, 'Unknown User') AS username,
                       p.name AS project_name
                FROM invoice_timesheets it
                JOIN timesheets t ON t.id = it.timesheet_id
                LEFT JOIN users u ON u.id = t.user_id
                LEFT JOIN projects p ON p.id = t.project_id
                WHERE it.invoice_id=%s
                ORDER BY t.week_starting, t.id
                """,
                (int(invoice_id),),
            )
            return [to_timesheet(r) for r in fetchall(cur)]

    def create_with_timesheets(
        self,
        timesheet_ids: Sequence[int],
        build: Callable[[Sequence[Timesheet]], NewInvoice],
    ) -> Invoice:
        ids = [int(i) for i in timesheet_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            # Row locks keep a concurrent invoice run or edit off these timesheets
            # until commit; the totals are computed from exactly these rows.
            cur.execute(
                f"SELECT {TIMESHEET_COLUMNS} FROM timesheets t WHERE t.id IN ({in_clause(ids)}) FOR UPDATE",
                tuple(ids),
            )
            locked = [to_timesheet(r) for r in fetchall(cur)]
            check_invoice_batch(ids, locked)
            invoice = build(locked)

            reference = _next_invoice_reference(cur)
            cur.execute(
                """
                INSERT INTO invoices(
                    reference_number, user_id, subtotal, vat_rate, cis_rate, total_amount,
                    normal_hours, overtime_hours, normal_rate, overtime_rate, status, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    reference,
                    int(invoice.user_id),
                    invoice.subtotal,
                    invoice.vat_rate,
                    invoice.cis_rate,
                    invoice.total_amount,
                    invoice.normal_hours,
                    invoice.overtime_hours,
                    invoice.normal_rate,
                    invoice.overtime_rate,
                    invoice.status.value,
                    invoice.notes,
                ),
            )
            invoice_id = int(cur.lastrowid)

            cur.executemany(
                "INSERT INTO invoice_timesheets(invoice_id, timesheet_id) VALUES(%s,%s)",
                [(invoice_id, timesheet_id) for timesheet_id in ids],
            )
            cur.execute(
                f"UPDATE timesheets SET status=%s WHERE status=%s AND id IN ({in_clause(ids)})",
                (TimesheetStatus.INVOICED.value, TimesheetStatus.APPROVED.value) + tuple(ids),
            )
            if cur.rowcount != len(ids):
                # Raising inside db_cursor rolls back the invoice and join rows.
                _raise_for_unflipped(cur, ids)

            created = self._get(cur, invoice_id)

        if created is None:
            raise NotFoundError("Invoice not found after insert")
        return created

    def update(self, invoice_id: int, *, status: InvoiceStatus, notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE invoices SET status=%s, notes=%s WHERE id=%s",
                (status.value, notes, int(invoice_id)),
            )
            return cur.rowcount > 0

    def delete_and_revert(self, invoice_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT timesheet_id FROM invoice_timesheets WHERE invoice_id=%s FOR UPDATE",
                (int(invoice_id),),
            )
            linked = [int(r["timesheet_id"]) for r in fetchall(cur)]

            if linked:
                cur.execute(
                    f"UPDATE timesheets SET status=%s WHERE id IN ({in_clause(linked)})",
                    (TimesheetStatus.APPROVED.value,) + tuple(linked),
                )
            cur.execute("DELETE FROM invoice_timesheets WHERE invoice_id=%s", (int(invoice_id),))
            cur.execute("DELETE FROM invoices WHERE id=%s", (int(invoice_id),))
            return linked

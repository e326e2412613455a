from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.money import format_hours, format_money
from ..core.enums import InvoiceStatus
from ..payroll.totals import compute_invoice_amounts


@dataclass(frozen=True)
class NewInvoice:
    """Invoice row to insert; amounts are already rounded to 2 places."""

    user_id: int
    subtotal: Decimal
    vat_rate: Decimal
    cis_rate: Decimal
    total_amount: Decimal
    normal_hours: Decimal
    overtime_hours: Decimal
    normal_rate: Optional[Decimal] = None
    overtime_rate: Optional[Decimal] = None
    status: InvoiceStatus = InvoiceStatus.PENDING
    notes: Optional[str] = None


@dataclass(frozen=True)
class Invoice:
    invoice_id: int
    reference_number: str
    user_id: int
    subtotal: Decimal
    vat_rate: Decimal
    cis_rate: Decimal
    total_amount: Decimal
    normal_hours: Decimal
    overtime_hours: Decimal
    status: InvoiceStatus
    created_at: datetime
    normal_rate: Optional[Decimal] = None
    overtime_rate: Optional[Decimal] = None
    notes: Optional[str] = None
    username: Optional[str] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        vat_amount, cis_amount, _ = compute_invoice_amounts(
            self.subtotal, vat_rate=self.vat_rate, cis_rate=self.cis_rate
        )
        out = {
            "id": self.invoice_id,
            "referenceNumber": self.reference_number,
            "userId": self.user_id,
            "subtotal": format_money(self.subtotal),
            "vatRate": str(self.vat_rate),
            "cisRate": str(self.cis_rate),
            "vatAmount": format_money(vat_amount),
            "cisAmount": format_money(cis_amount),
            "totalAmount": format_money(self.total_amount),
            "normalHours": format_hours(self.normal_hours),
            "overtimeHours": format_hours(self.overtime_hours),
            "normalRate": format_money(self.normal_rate) if self.normal_rate is not None else None,
            "overtimeRate": format_money(self.overtime_rate) if self.overtime_rate is not None else None,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "notes": self.notes,
        }
        if self.username is not None:
            out["username"] = self.username
        return out

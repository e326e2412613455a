from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Protocol

from ..common.money import format_hours, format_money, quantize_hours, quantize_money
from ..core.enums import WEEKDAYS
from .calculator.base import HourSplitCalculator
from .model import ShiftWindow, WorkPolicy

HUNDRED = Decimal(100)


class BillableHours(Protocol):
    """Anything carrying hours and the rates they are billed at (timesheets, preview rows)."""

    normal_hours: Decimal
    normal_rate: Decimal
    overtime_hours: Decimal
    overtime_rate: Decimal


@dataclass(frozen=True)
class WeeklyTotals:
    normal_hours: Decimal
    overtime_hours: Decimal
    normal_rate: Decimal
    overtime_rate: Decimal

    @property
    def total_hours(self) -> Decimal:
        return self.normal_hours + self.overtime_hours

    @property
    def total_cost(self) -> Decimal:
        return quantize_money(line_cost(self))


@dataclass(frozen=True)
class InvoiceTotals:
    """Invoice financials; amounts are kept unrounded until ``rounded()``/``to_dict()``."""

    normal_hours: Decimal
    overtime_hours: Decimal
    subtotal: Decimal
    vat_rate: Decimal
    cis_rate: Decimal
    vat_amount: Decimal
    cis_amount: Decimal
    total_amount: Decimal

    def rounded(self) -> "InvoiceTotals":
        return InvoiceTotals(
            normal_hours=quantize_hours(self.normal_hours),
            overtime_hours=quantize_hours(self.overtime_hours),
            subtotal=quantize_money(self.subtotal),
            vat_rate=self.vat_rate,
            cis_rate=self.cis_rate,
            vat_amount=quantize_money(self.vat_amount),
            cis_amount=quantize_money(self.cis_amount),
            total_amount=quantize_money(self.total_amount),
        )

    def to_dict(self) -> dict:
        return {
            "normalHours": format_hours(self.normal_hours),
            "overtimeHours": format_hours(self.overtime_hours),
            "subtotal": format_money(self.subtotal),
            "vatRate": str(self.vat_rate),
            "cisRate": str(self.cis_rate),
            "vatAmount": format_money(self.vat_amount),
            "cisAmount": format_money(self.cis_amount),
            "totalAmount": format_money(self.total_amount),
        }


def line_cost(line: BillableHours) -> Decimal:
    return line.normal_hours * line.normal_rate + line.overtime_hours * line.overtime_rate


def compute_weekly_totals(
    daily_hours: Mapping[str, ShiftWindow],
    policy: WorkPolicy,
    *,
    normal_rate: Decimal,
    overtime_rate: Decimal,
    calculator: HourSplitCalculator,
) -> WeeklyTotals:
    """Split every weekday's shift and sum the parts; days not worked contribute zero."""
    normal = Decimal("0.00")
    overtime = Decimal("0.00")
    for day in WEEKDAYS:
        shift = daily_hours.get(day)
        if shift is None or not shift.is_worked:
            continue
        part = calculator.split(shift, policy)
        normal += part.normal_hours
        overtime += part.overtime_hours

    return WeeklyTotals(
        normal_hours=normal,
        overtime_hours=overtime,
        normal_rate=normal_rate,
        overtime_rate=overtime_rate,
    )


def compute_invoice_amounts(subtotal: Decimal, *, vat_rate: Decimal, cis_rate: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """Return (vat_amount, cis_amount, total_amount). VAT is added, CIS is deducted."""
    vat_amount = subtotal * vat_rate / HUNDRED
    cis_amount = subtotal * cis_rate / HUNDRED
    return vat_amount, cis_amount, subtotal + vat_amount - cis_amount


def compute_invoice_totals(
    lines: Iterable[BillableHours],
    *,
    vat_rate: Decimal,
    cis_rate: Decimal,
) -> InvoiceTotals:
    normal = Decimal(0)
    overtime = Decimal(0)
    subtotal = Decimal(0)
    for line in lines:
        normal += line.normal_hours
        overtime += line.overtime_hours
        subtotal += line_cost(line)

    vat_amount, cis_amount, total = compute_invoice_amounts(subtotal, vat_rate=vat_rate, cis_rate=cis_rate)
    return InvoiceTotals(
        normal_hours=normal,
        overtime_hours=overtime,
        subtotal=subtotal,
        vat_rate=vat_rate,
        cis_rate=cis_rate,
        vat_amount=vat_amount,
        cis_amount=cis_amount,
        total_amount=total,
    )

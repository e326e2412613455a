from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping, Optional

from .calculator.base import HourSplitCalculator
from .calculator.standard_calculator import StandardHourSplitCalculator
from .model import HourSplit, ShiftWindow, WorkPolicy
from .totals import BillableHours, InvoiceTotals, WeeklyTotals, compute_invoice_totals, compute_weekly_totals


class PayrollService:
    """Hours-to-money pipeline: per-day split -> per-timesheet totals -> per-invoice totals."""

    def __init__(self, *, calculator: Optional[HourSplitCalculator] = None):
        self._calculator = calculator or StandardHourSplitCalculator()

    def split_day(self, shift: ShiftWindow, policy: WorkPolicy) -> HourSplit:
        return self._calculator.split(shift, policy)

    def timesheet_totals(
        self,
        daily_hours: Mapping[str, ShiftWindow],
        policy: WorkPolicy,
        *,
        normal_rate: Decimal,
        overtime_rate: Decimal,
    ) -> WeeklyTotals:
        return compute_weekly_totals(
            daily_hours,
            policy,
            normal_rate=normal_rate,
            overtime_rate=overtime_rate,
            calculator=self._calculator,
        )

    def invoice_totals(self, lines: Iterable[BillableHours], *, vat_rate: Decimal, cis_rate: Decimal) -> InvoiceTotals:
        return compute_invoice_totals(lines, vat_rate=vat_rate, cis_rate=cis_rate)

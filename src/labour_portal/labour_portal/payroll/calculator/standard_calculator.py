from __future__ import annotations

from decimal import Decimal

from ...common.datetime_utils import parse_hhmm
from ...common.money import quantize_hours
from ...core.constants import MINUTES_PER_DAY
from ..model import ZERO_SPLIT, HourSplit, ShiftWindow, WorkPolicy
from .base import HourSplitCalculator


def minutes_to_hours(minutes: int) -> Decimal:
    """Hours rounded half-up to 2 decimal places."""
    return quantize_hours(Decimal(int(minutes)) / Decimal(60))


def shift_bounds(shift: ShiftWindow) -> tuple[int, int]:
    """Start/end in minutes; an end before the start means the shift crosses midnight."""
    start = parse_hhmm(shift.start)
    end = parse_hhmm(shift.end)
    if end < start:
        end += MINUTES_PER_DAY
    return start, end


def shift_duration(shift: ShiftWindow) -> Decimal:
    if not shift.is_worked:
        return Decimal("0.00")
    start, end = shift_bounds(shift)
    return minutes_to_hours(end - start)


def _overlap(start: int, end: int, window_start: int, window_end: int) -> int:
    return max(0, min(end, window_end) - max(start, window_start))


class StandardHourSplitCalculator(HourSplitCalculator):
    """Standard rule, evaluated in order:

    1. shift inside the normal window -> all normal;
    2. shift inside the overtime window -> all overtime;
    3. otherwise normal = overlap with [normal_start, normal_end],
       overtime = overlap with [normal_end, overtime_end], and whatever is
       left of the shift (before normal start / after overtime end) is
       counted as normal, so the two parts always sum to the duration.
    """

    def split(self, shift: ShiftWindow, policy: WorkPolicy) -> HourSplit:
        if not shift.is_worked:
            return ZERO_SPLIT

        start, end = shift_bounds(shift)
        normal_start = parse_hhmm(policy.normal_start)
        normal_end = parse_hhmm(policy.normal_end)
        overtime_end = parse_hhmm(policy.overtime_end)

        total = minutes_to_hours(end - start)

        if start >= normal_start and end <= normal_end:
            return HourSplit(normal_hours=total, overtime_hours=Decimal("0.00"))

        if start >= normal_end and end <= overtime_end:
            return HourSplit(normal_hours=Decimal("0.00"), overtime_hours=total)

        normal = minutes_to_hours(_overlap(start, end, normal_start, normal_end))
        overtime = minutes_to_hours(_overlap(start, end, normal_end, overtime_end))
        # Hours outside both windows count as normal; normal + overtime == total.
        residual = total - normal - overtime
        normal += residual
        return HourSplit(normal_hours=normal, overtime_hours=overtime)

from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import HourSplit, ShiftWindow, WorkPolicy


class HourSplitCalculator(ABC):
    """Calculator interface (Strategy Pattern for normal/overtime classification)."""

    @abstractmethod
    def split(self, shift: ShiftWindow, policy: WorkPolicy) -> HourSplit:
        raise NotImplementedError

from __future__ import annotations

from ...core.constants import DURATION_HOURS
from .base import HoursCalculator


class LenientHoursCalculator(HoursCalculator):
    """Default rule: unknown labels count as 0 hours."""

    def hours(self, duration: str) -> float:
        return DURATION_HOURS.get(duration, 0.0)

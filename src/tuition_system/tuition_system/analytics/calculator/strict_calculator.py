from __future__ import annotations

from ...core.constants import DURATION_HOURS
from ...core.exceptions import ValidationError
from .base import HoursCalculator


class StrictHoursCalculator(HoursCalculator):
    """Refuses to aggregate records whose duration is outside the known set."""

    def hours(self, duration: str) -> float:
        try:
            return DURATION_HOURS[duration]
        except KeyError:
            raise ValidationError(f"Unknown class duration: {duration!r}")

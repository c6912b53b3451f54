from __future__ import annotations

from abc import ABC, abstractmethod


class HoursCalculator(ABC):
    """Turns a stored class duration label into teaching hours (Strategy Pattern)."""

    @abstractmethod
    def hours(self, duration: str) -> float:
        raise NotImplementedError

from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import GracePeriodDecision


class GracePeriodCalculator(ABC):
    """Calculator interface (Strategy Pattern for grace periods)."""

    @abstractmethod
    def calculate(self, delay_minutes: int, reason: str) -> GracePeriodDecision:
        raise NotImplementedError

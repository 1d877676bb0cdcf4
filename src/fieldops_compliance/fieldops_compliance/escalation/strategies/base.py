from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...core.enums import BreakdownType
from ..model import EscalationDecision


class EscalationStrategy(ABC):
    """Strategy Pattern: encapsulate how a breakdown escalates."""

    @abstractmethod
    def decide(self, *, breakdown_type: BreakdownType, description: str, assistance_required: bool) -> Optional[EscalationDecision]:
        raise NotImplementedError

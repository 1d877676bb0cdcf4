from __future__ import annotations

from typing import Optional

from ...core.enums import BreakdownType
from ..model import EscalationDecision
from .base import EscalationStrategy


class NoEscalationStrategy(EscalationStrategy):
    """Minor breakdown: vehicle can continue, nothing is requested."""

    def decide(self, *, breakdown_type: BreakdownType, description: str, assistance_required: bool) -> Optional[EscalationDecision]:
        return None

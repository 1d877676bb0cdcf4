from __future__ import annotations

from typing import Optional

from ...core.enums import BreakdownType, Urgency, VehicleRequestType
from ..model import EscalationDecision
from .base import EscalationStrategy


class ReplacementStrategy(EscalationStrategy):
    """Major breakdown: trip is delayed, ask for a replacement vehicle."""

    def decide(self, *, breakdown_type: BreakdownType, description: str, assistance_required: bool) -> Optional[EscalationDecision]:
        return EscalationDecision(
            request_type=VehicleRequestType.REPLACEMENT,
            urgency=Urgency.HIGH,
            reason=f"Major {breakdown_type.value} breakdown: {description}",
        )

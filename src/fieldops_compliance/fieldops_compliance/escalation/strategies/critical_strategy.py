from __future__ import annotations

from typing import Optional

from ...core.enums import BreakdownType, Urgency, VehicleRequestType
from ..model import EscalationDecision
from .base import EscalationStrategy


class EmergencyStrategy(EscalationStrategy):
    """Critical breakdown: vehicle cannot continue, emergency dispatch."""

    def decide(self, *, breakdown_type: BreakdownType, description: str, assistance_required: bool) -> Optional[EscalationDecision]:
        return EscalationDecision(
            request_type=VehicleRequestType.EMERGENCY,
            urgency=Urgency.CRITICAL,
            reason=f"Critical {breakdown_type.value} breakdown: {description}",
        )

from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import BreakdownSeverity
from .strategies.base import EscalationStrategy
from .strategies.critical_strategy import EmergencyStrategy
from .strategies.major_strategy import ReplacementStrategy
from .strategies.minor_strategy import NoEscalationStrategy


@dataclass
class EscalationStrategyFactory:
    """Factory Pattern: choose the escalation strategy for a severity."""

    def for_breakdown(self, severity: BreakdownSeverity) -> EscalationStrategy:
        severity = BreakdownSeverity(severity)
        if severity == BreakdownSeverity.CRITICAL:
            return EmergencyStrategy()
        if severity == BreakdownSeverity.MAJOR:
            return ReplacementStrategy()
        return NoEscalationStrategy()

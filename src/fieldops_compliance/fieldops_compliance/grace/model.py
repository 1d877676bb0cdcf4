from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet

from ..core.constants import (
    DEFAULT_GRACE_AUTO_APPROVAL_MINUTES,
    DEFAULT_GRACE_CAP_MINUTES,
    DEFAULT_LOW_RISK_DELAY_REASONS,
)


@dataclass(frozen=True)
class GracePeriodPolicy:
    """Tunable grace-period rules; supplied from settings."""

    cap_minutes: int = DEFAULT_GRACE_CAP_MINUTES
    auto_approval_threshold_minutes: int = DEFAULT_GRACE_AUTO_APPROVAL_MINUTES
    low_risk_reasons: FrozenSet[str] = field(default_factory=lambda: frozenset(DEFAULT_LOW_RISK_DELAY_REASONS))

    def is_low_risk(self, reason: str) -> bool:
        return (reason or "").strip().lower() in self.low_risk_reasons


@dataclass(frozen=True)
class GracePeriodDecision:
    grace_period_minutes: int
    auto_approved: bool
    requires_approval: bool

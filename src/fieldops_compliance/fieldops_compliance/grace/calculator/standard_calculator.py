from __future__ import annotations

from typing import Optional

from ...common.validators import require_non_empty, require_positive
from ..model import GracePeriodDecision, GracePeriodPolicy
from .base import GracePeriodCalculator


class StandardGracePeriodCalculator(GracePeriodCalculator):
    """Standard rule: grace = min(delay, cap); auto-approve short low-risk delays."""

    def __init__(self, policy: Optional[GracePeriodPolicy] = None):
        self._policy = policy or GracePeriodPolicy()

    @property
    def policy(self) -> GracePeriodPolicy:
        return self._policy

    def calculate(self, delay_minutes: int, reason: str) -> GracePeriodDecision:
        require_positive(delay_minutes, "Delay minutes")
        require_non_empty(reason, "Delay reason")

        grace = min(int(delay_minutes), self._policy.cap_minutes)
        auto = delay_minutes <= self._policy.auto_approval_threshold_minutes and self._policy.is_low_risk(reason)
        return GracePeriodDecision(
            grace_period_minutes=grace,
            auto_approved=auto,
            requires_approval=not auto,
        )

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CheckoutStatus:
    is_forgotten: bool
    hours_checked_in: float
    requires_regularization: bool
    message: str

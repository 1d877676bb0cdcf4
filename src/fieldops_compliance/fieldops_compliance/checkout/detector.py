from __future__ import annotations

import math
from datetime import datetime

from ..core.constants import DEFAULT_FORGOTTEN_HOURS, DEFAULT_REGULARIZATION_HOURS
from ..core.exceptions import DataIntegrityError, ValidationError
from .model import CheckoutStatus


class ForgottenCheckoutDetector:
    """Classifies how long a session has been open.

    Never closes anything itself: the host offers "request regularization"
    or "force checkout now" when ``requires_regularization`` is set.
    """

    def __init__(
        self,
        *,
        regularization_hours: float = DEFAULT_REGULARIZATION_HOURS,
        forgotten_hours: float = DEFAULT_FORGOTTEN_HOURS,
    ):
        if forgotten_hours < regularization_hours:
            raise ValidationError("Forgotten-checkout threshold cannot be below the regularization threshold")
        self._regularization_hours = float(regularization_hours)
        self._forgotten_hours = float(forgotten_hours)

    def check(self, check_in_time: datetime, now: datetime) -> CheckoutStatus:
        if now < check_in_time:
            raise DataIntegrityError("Current time is before the check-in time")

        hours = (now - check_in_time).total_seconds() / 3600
        is_forgotten = hours > self._forgotten_hours
        requires_regularization = hours > self._regularization_hours
        whole = math.floor(hours)

        if is_forgotten:
            message = f"Checked in for {whole} hours. Please contact supervisor for checkout regularization."
        elif requires_regularization:
            message = f"Long work session ({whole} hours). Consider checking out or contact supervisor."
        else:
            message = f"Active session: {whole} hours"

        return CheckoutStatus(
            is_forgotten=is_forgotten,
            hours_checked_in=hours,
            requires_regularization=requires_regularization,
            message=message,
        )

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidationResult:
    """Shared verdict shape for time-window and geofence checks."""

    is_valid: bool
    can_proceed: bool
    message: str
    is_grace_period: bool = False
    distance: Optional[float] = None
    classification: Optional[str] = None
    accuracy_risk: bool = False


@dataclass(frozen=True)
class GuardCheck:
    """One failed guard attached to a GuardFailure."""

    name: str
    result: ValidationResult
    overridable: bool = True

    def describe(self) -> str:
        return f"{self.name}: {self.result.message}"

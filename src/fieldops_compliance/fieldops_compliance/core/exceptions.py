from __future__ import annotations

from typing import Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .results import GuardCheck


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a machine-checkable ``kind`` plus the message the
    host shows to the operator. None of them is fatal: the session or task
    the call was made on is left untouched.
    """

    kind = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PreconditionError(DomainError):
    """Raised when a required gate was not satisfied before a transition."""

    kind = "precondition"


class LocationUnavailableError(PreconditionError):
    """Raised when an operation needs the current position and none is known."""

    kind = "location_unavailable"

    def __init__(self, message: str = "GPS location is required for this action"):
        super().__init__(message)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation"


class DataIntegrityError(DomainError):
    """Raised when a derived quantity is impossible (e.g. negative distance)."""

    kind = "data_integrity"


class GuardFailure(DomainError):
    """Raised when a time-window, geofence or worker-count guard rejects a transition.

    ``checks`` lists every failed guard so the host can render an override
    prompt; calling again with ``override=True`` forces the transition unless
    one of the checks is not overridable.
    """

    kind = "guard_failure"

    def __init__(self, message: str, checks: Sequence["GuardCheck"] = (), target: Optional[str] = None):
        super().__init__(message)
        self.checks = tuple(checks)
        self.target = target

    @property
    def overridable(self) -> bool:
        return bool(self.checks) and all(c.overridable for c in self.checks)

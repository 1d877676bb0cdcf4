from __future__ import annotations

from enum import Enum


class SessionStatus(str, Enum):
    """Attendance session lifecycle for one driver and one calendar day."""

    NOT_LOGGED_IN = "NOT_LOGGED_IN"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"


class TripStatus(str, Enum):
    """Transport task lifecycle. Strictly forward, no skipping."""

    PENDING = "pending"
    EN_ROUTE_PICKUP = "en_route_pickup"
    PICKUP_COMPLETE = "pickup_complete"
    EN_ROUTE_DROPOFF = "en_route_dropoff"
    COMPLETED = "completed"


class LunchAction(str, Enum):
    START = "start"
    END = "end"


class LogoutClassification(str, Enum):
    EARLY = "early"
    ON_TIME = "on_time"
    LATE = "late"


class BreakdownType(str, Enum):
    MECHANICAL = "mechanical"
    ACCIDENT = "accident"
    TRAFFIC = "traffic"
    WEATHER = "weather"
    OTHER = "other"


class BreakdownSeverity(str, Enum):
    """minor: can continue, major: delayed, critical: cannot continue."""

    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


class VehicleRequestType(str, Enum):
    REPLACEMENT = "replacement"
    ADDITIONAL = "additional"
    EMERGENCY = "emergency"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]


_URGENCY_RANK = {
    Urgency.LOW: 0,
    Urgency.MEDIUM: 1,
    Urgency.HIGH: 2,
    Urgency.CRITICAL: 3,
}


class VehicleRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FULFILLED = "fulfilled"

    @property
    def is_open(self) -> bool:
        return self in (VehicleRequestStatus.PENDING, VehicleRequestStatus.APPROVED)


class MismatchReason(str, Enum):
    """Why a manifest worker was not picked up."""

    ABSENT = "absent"
    SHIFTED = "shifted"
    MEDICAL = "medical"
    OTHER = "other"


class RegularizationStatus(str, Enum):
    PENDING = "PENDING"

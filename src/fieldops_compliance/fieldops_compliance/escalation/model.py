from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Urgency, VehicleRequestStatus, VehicleRequestType


@dataclass(frozen=True)
class AlternateVehicle:
    vehicle_id: int
    plate_number: Optional[str] = None
    estimated_arrival: Optional[datetime] = None


@dataclass(frozen=True)
class VehicleRequest:
    """Replacement / additional / emergency vehicle request for one task.

    At most one request per task is open (pending or approved).
    """

    request_id: str
    task_id: int
    request_type: VehicleRequestType
    urgency: Urgency
    reason: str
    status: VehicleRequestStatus
    requested_at: datetime
    automatic: bool = False
    alternate_vehicle: Optional[AlternateVehicle] = None
    resolution_note: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status.is_open


@dataclass(frozen=True)
class EscalationDecision:
    """What a breakdown severity asks for; None of these means no request."""

    request_type: VehicleRequestType
    urgency: Urgency
    reason: str

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from ..core.enums import BreakdownSeverity, BreakdownType, MismatchReason, TripStatus
from ..escalation.model import VehicleRequest
from ..geo.model import GeofenceZone, GeoPoint
from ..grace.model import GracePeriodDecision
from ..timewindow.model import TimeWindow


@dataclass(frozen=True)
class WorkerManifestEntry:
    worker_id: int
    name: str
    checked_in: bool = False
    check_in_time: Optional[datetime] = None


@dataclass(frozen=True)
class PickupLocation:
    location_id: int
    name: str
    estimated_pickup_time: datetime
    time_window: Optional[TimeWindow] = None
    geofence: Optional[GeofenceZone] = None
    workers: tuple[WorkerManifestEntry, ...] = ()
    actual_pickup_time: Optional[datetime] = None

    @property
    def checked_in_workers(self) -> int:
        return sum(1 for w in self.workers if w.checked_in)

    def find_worker(self, worker_id: int) -> Optional[WorkerManifestEntry]:
        return next((w for w in self.workers if w.worker_id == worker_id), None)


@dataclass(frozen=True)
class DropoffLocation:
    name: str
    geofence: Optional[GeofenceZone] = None
    estimated_arrival: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None


@dataclass(frozen=True)
class StatusChange:
    """History entry for one status transition."""

    task_id: int
    from_status: TripStatus
    to_status: TripStatus
    location: GeoPoint
    timestamp: datetime
    notes: Optional[str] = None
    overridden: bool = False
    exceptions: tuple[str, ...] = ()

    @property
    def requires_review(self) -> bool:
        return self.overridden


@dataclass(frozen=True)
class DelayReport:
    task_id: int
    reason: str
    estimated_delay: int
    location: GeoPoint
    description: str
    timestamp: datetime
    grace: GracePeriodDecision


@dataclass(frozen=True)
class BreakdownReport:
    task_id: int
    breakdown_type: BreakdownType
    severity: BreakdownSeverity
    location: GeoPoint
    description: str
    assistance_required: bool
    timestamp: datetime


@dataclass(frozen=True)
class WorkerMismatch:
    worker_id: int
    reason: MismatchReason
    remarks: str = ""


@dataclass(frozen=True)
class WorkerMismatchReport:
    task_id: int
    location_id: int
    expected_workers: int
    actual_workers: int
    mismatches: tuple[WorkerMismatch, ...]
    timestamp: datetime


HistoryEntry = Union[StatusChange, DelayReport, BreakdownReport, WorkerMismatchReport]


@dataclass(frozen=True)
class TransportTask:
    """Domain entity: one dispatched trip and its append-only history."""

    task_id: int
    status: TripStatus
    pickup_locations: tuple[PickupLocation, ...]
    dropoff_location: DropoffLocation
    driver_id: Optional[int] = None
    route: Optional[str] = None
    vehicle_requests: tuple[VehicleRequest, ...] = ()
    history: tuple[HistoryEntry, ...] = field(default=())

    @property
    def total_workers(self) -> int:
        return sum(len(p.workers) for p in self.pickup_locations)

    @property
    def checked_in_workers(self) -> int:
        return sum(p.checked_in_workers for p in self.pickup_locations)

    @property
    def vehicle_request(self) -> Optional[VehicleRequest]:
        """The open request, else the most recent one."""
        open_req = next((r for r in self.vehicle_requests if r.is_open), None)
        if open_req is not None:
            return open_req
        return self.vehicle_requests[-1] if self.vehicle_requests else None

    def find_pickup(self, location_id: int) -> Optional[PickupLocation]:
        return next((p for p in self.pickup_locations if p.location_id == location_id), None)

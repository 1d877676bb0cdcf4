"""Domain event records returned by the machines.

The engine never persists or dispatches these; the host does.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import ClassVar, Optional, Union

from ..core.enums import LunchAction, TripStatus, VehicleRequestStatus
from ..escalation.model import VehicleRequest
from ..geo.model import GeoPoint
from ..grace.model import GracePeriodDecision
from ..trips.model import BreakdownReport, DelayReport, WorkerMismatchReport


@dataclass(frozen=True)
class StatusUpdated:
    kind: ClassVar[str] = "status_updated"

    task_id: int
    from_status: TripStatus
    to_status: TripStatus
    location: GeoPoint
    timestamp: datetime
    overridden: bool = False
    requires_review: bool = False
    exceptions: tuple[str, ...] = ()


@dataclass(frozen=True)
class DelayReported:
    kind: ClassVar[str] = "delay_reported"

    task_id: int
    report: DelayReport
    grace: GracePeriodDecision
    vehicle_replacement_suggested: bool


@dataclass(frozen=True)
class BreakdownReported:
    kind: ClassVar[str] = "breakdown_reported"

    task_id: int
    report: BreakdownReport


@dataclass(frozen=True)
class VehicleRequested:
    kind: ClassVar[str] = "vehicle_requested"

    task_id: int
    request: VehicleRequest
    superseded_request_id: Optional[str] = None


@dataclass(frozen=True)
class VehicleRequestUpdated:
    kind: ClassVar[str] = "vehicle_request_updated"

    task_id: int
    request_id: str
    status: VehicleRequestStatus
    timestamp: datetime


@dataclass(frozen=True)
class WorkerCheckedIn:
    kind: ClassVar[str] = "worker_checked_in"

    task_id: int
    location_id: int
    worker_id: int
    timestamp: datetime


@dataclass(frozen=True)
class WorkerCountMismatchRecorded:
    kind: ClassVar[str] = "worker_count_mismatch_recorded"

    task_id: int
    report: WorkerMismatchReport


@dataclass(frozen=True)
class SessionClockedIn:
    kind: ClassVar[str] = "session_clocked_in"

    driver_id: int
    work_date: date
    vehicle_id: int
    check_in_time: datetime
    late_login: bool


@dataclass(frozen=True)
class SessionClockedOut:
    kind: ClassVar[str] = "session_clocked_out"

    driver_id: int
    work_date: date
    check_out_time: datetime
    total_hours: float
    total_distance: float
    irregular: bool = False


@dataclass(frozen=True)
class LunchBreakRecorded:
    kind: ClassVar[str] = "lunch_break_recorded"

    driver_id: int
    work_date: date
    action: LunchAction
    timestamp: datetime
    late: bool


@dataclass(frozen=True)
class RegularizationRequested:
    kind: ClassVar[str] = "regularization_requested"

    driver_id: int
    work_date: date
    requested_checkout_time: datetime
    reason: str


DomainEvent = Union[
    StatusUpdated,
    DelayReported,
    BreakdownReported,
    VehicleRequested,
    VehicleRequestUpdated,
    WorkerCheckedIn,
    WorkerCountMismatchRecorded,
    SessionClockedIn,
    SessionClockedOut,
    LunchBreakRecorded,
    RegularizationRequested,
]

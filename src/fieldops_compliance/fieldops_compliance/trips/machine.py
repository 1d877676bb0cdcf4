"""
Trip status state machine.

pending -> en_route_pickup -> pickup_complete -> en_route_dropoff -> completed

Tasks are frozen values: every operation returns a new task plus the events
it produced, and a failed call leaves the caller's task untouched. Delay,
breakdown, vehicle-request and worker-manifest operations are side channels
that append history without moving the status.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.validators import require_choice, require_non_empty, require_positive
from ..core.enums import BreakdownSeverity, BreakdownType, MismatchReason, TripStatus, Urgency, VehicleRequestType
from ..core.exceptions import GuardFailure, LocationUnavailableError, PreconditionError, ValidationError
from ..core.results import GuardCheck, ValidationResult
from ..escalation.model import AlternateVehicle, VehicleRequest
from ..escalation.policy import EscalationPolicy
from ..events.model import (
    BreakdownReported,
    DelayReported,
    DomainEvent,
    StatusUpdated,
    VehicleRequested,
    VehicleRequestUpdated,
    WorkerCheckedIn,
    WorkerCountMismatchRecorded,
)
from ..geo.model import GeoPoint
from ..geo.validator import validate_geofence
from ..grace.calculator.base import GracePeriodCalculator
from ..grace.calculator.standard_calculator import StandardGracePeriodCalculator
from ..grace.model import GracePeriodDecision
from ..timewindow.validator import validate_pickup_window
from .model import (
    BreakdownReport,
    DelayReport,
    PickupLocation,
    StatusChange,
    TransportTask,
    WorkerMismatch,
    WorkerMismatchReport,
)


# Every status has exactly one legal successor; completed has none.
NEXT_STATUS: dict[TripStatus, Optional[TripStatus]] = {
    TripStatus.PENDING: TripStatus.EN_ROUTE_PICKUP,
    TripStatus.EN_ROUTE_PICKUP: TripStatus.PICKUP_COMPLETE,
    TripStatus.PICKUP_COMPLETE: TripStatus.EN_ROUTE_DROPOFF,
    TripStatus.EN_ROUTE_DROPOFF: TripStatus.COMPLETED,
    TripStatus.COMPLETED: None,
}


@dataclass(frozen=True)
class TripResult:
    task: TransportTask
    events: tuple[DomainEvent, ...]


@dataclass(frozen=True)
class DelayOutcome(TripResult):
    report: DelayReport
    grace: GracePeriodDecision
    vehicle_replacement_suggested: bool


@dataclass(frozen=True)
class BreakdownOutcome(TripResult):
    report: BreakdownReport
    vehicle_request: Optional[VehicleRequest]


def allowed_next(status: TripStatus) -> Optional[TripStatus]:
    return NEXT_STATUS[TripStatus(status)]


class TripStatusMachine:
    def __init__(
        self,
        *,
        grace_calculator: Optional[GracePeriodCalculator] = None,
        escalation: Optional[EscalationPolicy] = None,
    ):
        self._grace = grace_calculator or StandardGracePeriodCalculator()
        self._escalation = escalation or EscalationPolicy()

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------
    def advance(
        self,
        task: TransportTask,
        target: TripStatus,
        *,
        now: datetime,
        location: Optional[GeoPoint],
        override: bool = False,
        notes: Optional[str] = None,
        pickup_location_id: Optional[int] = None,
    ) -> TripResult:
        target = require_choice(target, TripStatus, "Trip status")
        expected = NEXT_STATUS[task.status]
        if expected is None:
            raise PreconditionError(f"Trip {task.task_id} is already completed")
        if target != expected:
            raise PreconditionError(
                f"Cannot move trip {task.task_id} from {task.status.value} to {target.value}; "
                f"next status is {expected.value}"
            )
        if location is None:
            raise LocationUnavailableError("GPS location is required for status updates")

        stops: tuple[PickupLocation, ...] = ()
        checks: list[GuardCheck] = []
        if target == TripStatus.PICKUP_COMPLETE:
            stops = self._open_pickups(task)
            guarded = self._guarded_pickups(task, stops, pickup_location_id)
            for stop in stops:
                if stop in guarded:
                    checks.extend(self._pickup_checks(stop, now=now, location=location))
                checks.extend(self._worker_checks(stop))
        elif target == TripStatus.COMPLETED:
            checks = self._dropoff_checks(task, location=location)

        if checks and (not override or not all(c.overridable for c in checks)):
            raise GuardFailure(
                f"Cannot mark trip {task.task_id} {target.value}: "
                + "; ".join(c.describe() for c in checks),
                checks=checks,
                target=target.value,
            )

        overridden = bool(checks)
        exceptions = tuple(c.describe() for c in checks)
        change = StatusChange(
            task_id=task.task_id,
            from_status=task.status,
            to_status=target,
            location=location,
            timestamp=now,
            notes=(notes or "").strip() or None,
            overridden=overridden,
            exceptions=exceptions,
        )

        updated = replace(task, status=target, history=task.history + (change,))
        for stop in stops:
            updated = self._replace_pickup(updated, replace(stop, actual_pickup_time=now))
        if target == TripStatus.COMPLETED:
            updated = replace(updated, dropoff_location=replace(updated.dropoff_location, actual_arrival=now))

        event = StatusUpdated(
            task_id=task.task_id,
            from_status=task.status,
            to_status=target,
            location=location,
            timestamp=now,
            overridden=overridden,
            requires_review=change.requires_review,
            exceptions=exceptions,
        )
        return TripResult(task=updated, events=(event,))

    @staticmethod
    def _open_pickups(task: TransportTask) -> tuple[PickupLocation, ...]:
        return tuple(p for p in task.pickup_locations if p.actual_pickup_time is None)

    @staticmethod
    def _guarded_pickups(
        task: TransportTask, stops: tuple[PickupLocation, ...], pickup_location_id: Optional[int]
    ) -> tuple[PickupLocation, ...]:
        # An explicit stop narrows the time-window and geofence guards to it.
        if pickup_location_id is None:
            return stops
        pickup = task.find_pickup(pickup_location_id)
        if pickup is None:
            raise ValidationError(f"Pickup location {pickup_location_id} is not part of trip {task.task_id}")
        return (pickup,)

    @staticmethod
    def _pickup_checks(pickup: PickupLocation, *, now: datetime, location: GeoPoint) -> list[GuardCheck]:
        checks = []
        if pickup.time_window is not None:
            result = validate_pickup_window(now, pickup.estimated_pickup_time, pickup.time_window.window_minutes)
            if not result.is_valid:
                checks.append(GuardCheck(name=f"time_window:{pickup.name}", result=result))
        if pickup.geofence is not None:
            result = validate_geofence(location, pickup.geofence, pickup.name)
            if not result.is_valid:
                checks.append(GuardCheck(name=f"geofence:{pickup.name}", result=result))
        return checks

    @staticmethod
    def _worker_checks(pickup: PickupLocation) -> list[GuardCheck]:
        total = len(pickup.workers)
        aboard = pickup.checked_in_workers
        if total == 0 or aboard == total:
            return []
        name = f"worker_count:{pickup.name}"
        if aboard == 0:
            result = ValidationResult(
                is_valid=False,
                can_proceed=False,
                message=f"No workers checked in at {pickup.name}; check in at least one worker first",
            )
            return [GuardCheck(name=name, result=result, overridable=False)]
        result = ValidationResult(
            is_valid=False,
            can_proceed=True,
            message=f"{total - aboard} worker(s) not checked in at {pickup.name} ({aboard}/{total})",
        )
        return [GuardCheck(name=name, result=result)]

    @staticmethod
    def _dropoff_checks(task: TransportTask, *, location: GeoPoint) -> list[GuardCheck]:
        dropoff = task.dropoff_location
        if dropoff.geofence is None:
            return []
        result = validate_geofence(location, dropoff.geofence, dropoff.name)
        if result.is_valid:
            return []
        return [GuardCheck(name=f"geofence:{dropoff.name}", result=result)]

    @staticmethod
    def _replace_pickup(task: TransportTask, pickup: PickupLocation) -> TransportTask:
        stops = tuple(pickup if p.location_id == pickup.location_id else p for p in task.pickup_locations)
        return replace(task, pickup_locations=stops)

    @staticmethod
    def _require_active(task: TransportTask, action: str) -> None:
        if task.status == TripStatus.COMPLETED:
            raise PreconditionError(f"Cannot {action}: trip {task.task_id} is already completed")

    # ------------------------------------------------------------------
    # Delay / breakdown / vehicle requests
    # ------------------------------------------------------------------
    def report_delay(
        self,
        task: TransportTask,
        *,
        reason: str,
        estimated_minutes: int,
        location: Optional[GeoPoint],
        description: str = "",
        now: datetime,
    ) -> DelayOutcome:
        reason = require_non_empty(reason, "Delay reason")
        require_positive(estimated_minutes, "Estimated delay minutes")
        self._require_active(task, "report a delay")
        if location is None:
            raise LocationUnavailableError("GPS location is required for delay reports")

        grace = self._grace.calculate(int(estimated_minutes), reason)
        report = DelayReport(
            task_id=task.task_id,
            reason=reason,
            estimated_delay=int(estimated_minutes),
            location=location,
            description=(description or "").strip(),
            timestamp=now,
            grace=grace,
        )
        suggested = self._escalation.suggests_replacement(int(estimated_minutes))
        updated = replace(task, history=task.history + (report,))
        event = DelayReported(
            task_id=task.task_id,
            report=report,
            grace=grace,
            vehicle_replacement_suggested=suggested,
        )
        return DelayOutcome(
            task=updated,
            events=(event,),
            report=report,
            grace=grace,
            vehicle_replacement_suggested=suggested,
        )

    def report_breakdown(
        self,
        task: TransportTask,
        *,
        breakdown_type: BreakdownType,
        severity: BreakdownSeverity,
        location: Optional[GeoPoint],
        description: str,
        assistance_required: bool = False,
        now: datetime,
    ) -> BreakdownOutcome:
        breakdown_type = require_choice(breakdown_type, BreakdownType, "Breakdown type")
        severity = require_choice(severity, BreakdownSeverity, "Breakdown severity")
        description = require_non_empty(description, "Breakdown description")
        self._require_active(task, "report a breakdown")
        if location is None:
            raise LocationUnavailableError("GPS location is required for breakdown reports")

        report = BreakdownReport(
            task_id=task.task_id,
            breakdown_type=breakdown_type,
            severity=severity,
            location=location,
            description=description,
            assistance_required=bool(assistance_required),
            timestamp=now,
        )
        updated = replace(task, history=task.history + (report,))
        events: list[DomainEvent] = [BreakdownReported(task_id=task.task_id, report=report)]

        request = self._escalation.breakdown_request(
            task_id=task.task_id,
            breakdown_type=breakdown_type,
            severity=severity,
            description=description,
            assistance_required=bool(assistance_required),
            now=now,
        )
        if request is not None:
            requests, superseded_id = self._escalation.admit(updated.vehicle_requests, request)
            updated = replace(updated, vehicle_requests=requests)
            events.append(VehicleRequested(task_id=task.task_id, request=request, superseded_request_id=superseded_id))

        return BreakdownOutcome(task=updated, events=tuple(events), report=report, vehicle_request=request)

    def request_vehicle(
        self,
        task: TransportTask,
        *,
        request_type: VehicleRequestType,
        reason: str,
        urgency: Urgency,
        now: datetime,
    ) -> TripResult:
        request = self._escalation.manual_request(
            task_id=task.task_id,
            request_type=request_type,
            urgency=urgency,
            reason=reason,
            now=now,
        )
        self._require_active(task, "request a vehicle")
        requests, superseded_id = self._escalation.admit(task.vehicle_requests, request)
        updated = replace(task, vehicle_requests=requests)
        event = VehicleRequested(task_id=task.task_id, request=request, superseded_request_id=superseded_id)
        return TripResult(task=updated, events=(event,))

    def approve_vehicle_request(
        self,
        task: TransportTask,
        *,
        request_id: str,
        now: datetime,
        alternate_vehicle: Optional[AlternateVehicle] = None,
        note: Optional[str] = None,
    ) -> TripResult:
        request = self._find_request(task, request_id)
        return self._replace_request(
            task, self._escalation.approve(request, alternate_vehicle=alternate_vehicle, note=note), now
        )

    def reject_vehicle_request(self, task: TransportTask, *, request_id: str, note: str, now: datetime) -> TripResult:
        request = self._find_request(task, request_id)
        return self._replace_request(task, self._escalation.reject(request, note=note), now)

    def fulfill_vehicle_request(self, task: TransportTask, *, request_id: str, now: datetime) -> TripResult:
        request = self._find_request(task, request_id)
        return self._replace_request(task, self._escalation.fulfill(request), now)

    @staticmethod
    def _find_request(task: TransportTask, request_id: str) -> VehicleRequest:
        request = next((r for r in task.vehicle_requests if r.request_id == request_id), None)
        if request is None:
            raise ValidationError(f"Vehicle request {request_id} not found on trip {task.task_id}")
        return request

    @staticmethod
    def _replace_request(task: TransportTask, request: VehicleRequest, now: datetime) -> TripResult:
        requests = tuple(request if r.request_id == request.request_id else r for r in task.vehicle_requests)
        event = VehicleRequestUpdated(
            task_id=task.task_id,
            request_id=request.request_id,
            status=request.status,
            timestamp=now,
        )
        return TripResult(task=replace(task, vehicle_requests=requests), events=(event,))

    # ------------------------------------------------------------------
    # Worker manifest
    # ------------------------------------------------------------------
    def check_in_worker(
        self,
        task: TransportTask,
        *,
        location_id: int,
        worker_id: int,
        now: datetime,
        location: Optional[GeoPoint],
    ) -> TripResult:
        if task.status != TripStatus.EN_ROUTE_PICKUP:
            raise PreconditionError(f"Workers can only be checked in while en route to pickup (trip is {task.status.value})")
        if location is None:
            raise LocationUnavailableError("GPS location is required for worker check-in")

        pickup = task.find_pickup(location_id)
        if pickup is None:
            raise ValidationError(f"Pickup location {location_id} is not part of trip {task.task_id}")
        worker = pickup.find_worker(worker_id)
        if worker is None:
            raise ValidationError(f"Worker {worker_id} is not on the manifest for {pickup.name}")
        if worker.checked_in:
            raise PreconditionError(f"Worker {worker_id} is already checked in")

        workers = tuple(
            replace(w, checked_in=True, check_in_time=now) if w.worker_id == worker_id else w
            for w in pickup.workers
        )
        updated = self._replace_pickup(task, replace(pickup, workers=workers))
        event = WorkerCheckedIn(task_id=task.task_id, location_id=location_id, worker_id=worker_id, timestamp=now)
        return TripResult(task=updated, events=(event,))

    def record_worker_mismatch(
        self,
        task: TransportTask,
        *,
        location_id: int,
        mismatches: Sequence[WorkerMismatch],
        now: datetime,
    ) -> TripResult:
        if task.status not in (TripStatus.EN_ROUTE_PICKUP, TripStatus.PICKUP_COMPLETE):
            raise PreconditionError(f"Worker count can only be reconciled at pickup (trip is {task.status.value})")
        pickup = task.find_pickup(location_id)
        if pickup is None:
            raise ValidationError(f"Pickup location {location_id} is not part of trip {task.task_id}")

        missing = {w.worker_id for w in pickup.workers if not w.checked_in}
        cleaned: list[WorkerMismatch] = []
        seen: set[int] = set()
        for m in mismatches:
            reason = require_choice(m.reason, MismatchReason, "Mismatch reason")
            if m.worker_id not in missing:
                raise ValidationError(f"Worker {m.worker_id} is not a missing worker at {pickup.name}")
            if m.worker_id in seen:
                raise ValidationError(f"Worker {m.worker_id} is listed twice")
            remarks = (m.remarks or "").strip()
            if reason == MismatchReason.OTHER and not remarks:
                raise ValidationError(f"Remarks are required for worker {m.worker_id} with reason 'other'")
            seen.add(m.worker_id)
            cleaned.append(WorkerMismatch(worker_id=m.worker_id, reason=reason, remarks=remarks))

        unexplained = sorted(missing - seen)
        if unexplained:
            raise ValidationError(f"Please select a reason for all missing workers: {unexplained}")
        if not cleaned:
            raise ValidationError(f"No worker count mismatch at {pickup.name}")

        report = WorkerMismatchReport(
            task_id=task.task_id,
            location_id=location_id,
            expected_workers=len(pickup.workers),
            actual_workers=pickup.checked_in_workers,
            mismatches=tuple(cleaned),
            timestamp=now,
        )
        updated = replace(task, history=task.history + (report,))
        return TripResult(task=updated, events=(WorkerCountMismatchRecorded(task_id=task.task_id, report=report),))

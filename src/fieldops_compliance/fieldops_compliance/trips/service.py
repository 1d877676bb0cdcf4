from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence, TypeVar

import structlog

from ..common.datetime_utils import now_local
from ..core.enums import BreakdownSeverity, BreakdownType, TripStatus, Urgency, VehicleRequestType
from ..core.exceptions import DomainError, ValidationError
from ..escalation.model import AlternateVehicle
from ..events.model import VehicleRequested
from ..events.publisher import EventPublisher
from ..geo.model import GeoPoint
from .machine import BreakdownOutcome, DelayOutcome, TripResult, TripStatusMachine, allowed_next
from .model import TransportTask, WorkerMismatch
from .repository import TaskRepository

logger = structlog.get_logger(__name__)

R = TypeVar("R", bound=TripResult)


class TripService:
    """Loads a task, runs the trip machine, saves and publishes.

    Callers serialize operations per task (one transition in flight at a
    time); this service adds no locking of its own.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        machine: TripStatusMachine,
        *,
        publisher: Optional[EventPublisher] = None,
    ):
        self._tasks = tasks
        self._machine = machine
        self._publisher = publisher

    def get_task(self, task_id: int) -> TransportTask:
        task = self._tasks.get_by_id(task_id)
        if task is None:
            raise ValidationError(f"Transport task {task_id} not found")
        return task

    def next_status(self, task_id: int) -> Optional[TripStatus]:
        return allowed_next(self.get_task(task_id).status)

    def _run(self, action: str, task_id: int, op: Callable[[TransportTask], R]) -> R:
        task = self.get_task(task_id)
        try:
            result = op(task)
        except DomainError as e:
            logger.info("trip_action_rejected", action=action, task_id=task_id, status=task.status.value, kind=e.kind, error=e.message)
            raise

        self._tasks.save(result.task)
        if self._publisher is not None and result.events:
            self._publisher.publish(result.events)
        logger.info(action, task_id=task_id, status=result.task.status.value)

        for event in result.events:
            if isinstance(event, VehicleRequested) and event.request.automatic:
                logger.warning(
                    "vehicle_request_escalated",
                    task_id=task_id,
                    request_id=event.request.request_id,
                    urgency=event.request.urgency.value,
                    superseded_request_id=event.superseded_request_id,
                )
        return result

    def advance_status(
        self,
        task_id: int,
        target: TripStatus,
        *,
        location: Optional[GeoPoint],
        override: bool = False,
        notes: Optional[str] = None,
        pickup_location_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> TripResult:
        now = now or now_local()
        result = self._run(
            "trip_status_updated",
            task_id,
            lambda task: self._machine.advance(
                task,
                target,
                now=now,
                location=location,
                override=override,
                notes=notes,
                pickup_location_id=pickup_location_id,
            ),
        )
        change = result.task.history[-1]
        if change.overridden:
            logger.warning(
                "trip_guard_overridden",
                task_id=task_id,
                to_status=result.task.status.value,
                exceptions=list(change.exceptions),
            )
        return result

    def report_delay(
        self,
        task_id: int,
        *,
        reason: str,
        estimated_minutes: int,
        location: Optional[GeoPoint],
        description: str = "",
        now: Optional[datetime] = None,
    ) -> DelayOutcome:
        now = now or now_local()
        return self._run(
            "delay_reported",
            task_id,
            lambda task: self._machine.report_delay(
                task,
                reason=reason,
                estimated_minutes=estimated_minutes,
                location=location,
                description=description,
                now=now,
            ),
        )

    def report_breakdown(
        self,
        task_id: int,
        *,
        breakdown_type: BreakdownType,
        severity: BreakdownSeverity,
        location: Optional[GeoPoint],
        description: str,
        assistance_required: bool = False,
        now: Optional[datetime] = None,
    ) -> BreakdownOutcome:
        now = now or now_local()
        return self._run(
            "breakdown_reported",
            task_id,
            lambda task: self._machine.report_breakdown(
                task,
                breakdown_type=breakdown_type,
                severity=severity,
                location=location,
                description=description,
                assistance_required=assistance_required,
                now=now,
            ),
        )

    def request_vehicle(
        self,
        task_id: int,
        *,
        request_type: VehicleRequestType,
        reason: str,
        urgency: Urgency,
        now: Optional[datetime] = None,
    ) -> TripResult:
        now = now or now_local()
        return self._run(
            "vehicle_requested",
            task_id,
            lambda task: self._machine.request_vehicle(
                task, request_type=request_type, reason=reason, urgency=urgency, now=now
            ),
        )

    def approve_vehicle_request(
        self,
        task_id: int,
        request_id: str,
        *,
        alternate_vehicle: Optional[AlternateVehicle] = None,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TripResult:
        now = now or now_local()
        return self._run(
            "vehicle_request_approved",
            task_id,
            lambda task: self._machine.approve_vehicle_request(
                task, request_id=request_id, now=now, alternate_vehicle=alternate_vehicle, note=note
            ),
        )

    def reject_vehicle_request(self, task_id: int, request_id: str, *, note: str, now: Optional[datetime] = None) -> TripResult:
        now = now or now_local()
        return self._run(
            "vehicle_request_rejected",
            task_id,
            lambda task: self._machine.reject_vehicle_request(task, request_id=request_id, note=note, now=now),
        )

    def fulfill_vehicle_request(self, task_id: int, request_id: str, *, now: Optional[datetime] = None) -> TripResult:
        now = now or now_local()
        return self._run(
            "vehicle_request_fulfilled",
            task_id,
            lambda task: self._machine.fulfill_vehicle_request(task, request_id=request_id, now=now),
        )

    def check_in_worker(
        self,
        task_id: int,
        *,
        location_id: int,
        worker_id: int,
        location: Optional[GeoPoint],
        now: Optional[datetime] = None,
    ) -> TripResult:
        now = now or now_local()
        return self._run(
            "worker_checked_in",
            task_id,
            lambda task: self._machine.check_in_worker(
                task, location_id=location_id, worker_id=worker_id, now=now, location=location
            ),
        )

    def record_worker_mismatch(
        self,
        task_id: int,
        *,
        location_id: int,
        mismatches: Sequence[WorkerMismatch],
        now: Optional[datetime] = None,
    ) -> TripResult:
        now = now or now_local()
        return self._run(
            "worker_count_mismatch_recorded",
            task_id,
            lambda task: self._machine.record_worker_mismatch(
                task, location_id=location_id, mismatches=mismatches, now=now
            ),
        )

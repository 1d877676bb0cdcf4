"""
Escalation rules.

Breakdowns of major/critical severity raise a vehicle request on their own;
long delays only suggest one. A task never holds more than one open request:
automatic escalations supersede the open one, operator requests supersede it
only when strictly more urgent and are rejected otherwise.
"""
from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.validators import require_choice, require_non_empty
from ..core.constants import DEFAULT_REPLACEMENT_SUGGESTION_MINUTES
from ..core.enums import BreakdownSeverity, BreakdownType, Urgency, VehicleRequestStatus, VehicleRequestType
from ..core.exceptions import PreconditionError
from .factory import EscalationStrategyFactory
from .model import AlternateVehicle, VehicleRequest


def new_request_id() -> str:
    return uuid.uuid4().hex


class EscalationPolicy:
    def __init__(
        self,
        *,
        strategy_factory: Optional[EscalationStrategyFactory] = None,
        replacement_suggestion_minutes: int = DEFAULT_REPLACEMENT_SUGGESTION_MINUTES,
        id_factory: Callable[[], str] = new_request_id,
    ):
        self._factory = strategy_factory or EscalationStrategyFactory()
        self._replacement_suggestion_minutes = int(replacement_suggestion_minutes)
        self._id_factory = id_factory

    def suggests_replacement(self, estimated_delay_minutes: int) -> bool:
        return estimated_delay_minutes >= self._replacement_suggestion_minutes

    def breakdown_request(
        self,
        *,
        task_id: int,
        breakdown_type: BreakdownType,
        severity: BreakdownSeverity,
        description: str,
        assistance_required: bool,
        now: datetime,
    ) -> Optional[VehicleRequest]:
        strategy = self._factory.for_breakdown(severity)
        decision = strategy.decide(
            breakdown_type=BreakdownType(breakdown_type),
            description=description,
            assistance_required=assistance_required,
        )
        if decision is None:
            return None
        return VehicleRequest(
            request_id=self._id_factory(),
            task_id=task_id,
            request_type=decision.request_type,
            urgency=decision.urgency,
            reason=decision.reason,
            status=VehicleRequestStatus.PENDING,
            requested_at=now,
            automatic=True,
        )

    def manual_request(
        self,
        *,
        task_id: int,
        request_type: VehicleRequestType,
        urgency: Urgency,
        reason: str,
        now: datetime,
    ) -> VehicleRequest:
        reason = require_non_empty(reason, "Vehicle request reason")
        request_type = require_choice(request_type, VehicleRequestType, "Request type")
        urgency = require_choice(urgency, Urgency, "Urgency")
        return VehicleRequest(
            request_id=self._id_factory(),
            task_id=task_id,
            request_type=request_type,
            urgency=urgency,
            reason=reason,
            status=VehicleRequestStatus.PENDING,
            requested_at=now,
            automatic=False,
        )

    @staticmethod
    def admit(
        existing: Sequence[VehicleRequest], new: VehicleRequest
    ) -> tuple[tuple[VehicleRequest, ...], Optional[str]]:
        """Append ``new`` keeping at most one open request.

        Returns the new request list and the id of the superseded request,
        if any.
        """
        open_req = next((r for r in existing if r.is_open), None)
        if open_req is None:
            return tuple(existing) + (new,), None

        if not new.automatic and new.urgency.rank <= open_req.urgency.rank:
            raise PreconditionError(
                f"Vehicle request {open_req.request_id} is still {open_req.status.value}; "
                f"a new request must be more urgent than '{open_req.urgency.value}'"
            )

        superseded = replace(
            open_req,
            status=VehicleRequestStatus.REJECTED,
            resolution_note=f"superseded by {new.request_id}",
        )
        updated = tuple(superseded if r.request_id == open_req.request_id else r for r in existing)
        return updated + (new,), open_req.request_id

    @staticmethod
    def approve(
        request: VehicleRequest,
        *,
        alternate_vehicle: Optional[AlternateVehicle] = None,
        note: Optional[str] = None,
    ) -> VehicleRequest:
        if request.status != VehicleRequestStatus.PENDING:
            raise PreconditionError(f"Only pending requests can be approved (request is {request.status.value})")
        return replace(
            request,
            status=VehicleRequestStatus.APPROVED,
            alternate_vehicle=alternate_vehicle,
            resolution_note=(note or "").strip() or None,
        )

    @staticmethod
    def reject(request: VehicleRequest, *, note: str) -> VehicleRequest:
        if request.status != VehicleRequestStatus.PENDING:
            raise PreconditionError(f"Only pending requests can be rejected (request is {request.status.value})")
        note = require_non_empty(note, "Rejection note")
        return replace(request, status=VehicleRequestStatus.REJECTED, resolution_note=note)

    @staticmethod
    def fulfill(request: VehicleRequest) -> VehicleRequest:
        if request.status != VehicleRequestStatus.APPROVED:
            raise PreconditionError(f"Only approved requests can be fulfilled (request is {request.status.value})")
        return replace(request, status=VehicleRequestStatus.FULFILLED)

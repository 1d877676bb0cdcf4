"""Render domain events as JSON-compatible dicts for the host's storage."""
from __future__ import annotations

from dataclasses import fields
from datetime import date, datetime
from enum import Enum

from ..escalation.model import VehicleRequest
from ..geo.model import GeoPoint
from ..geo.serializer import point_to_dict
from ..grace.model import GracePeriodDecision
from ..trips.model import BreakdownReport, DelayReport, WorkerMismatchReport
from ..trips.serializer import (
    breakdown_report_to_dict,
    delay_report_to_dict,
    grace_to_dict,
    mismatch_report_to_dict,
    vehicle_request_to_dict,
)
from .model import DomainEvent


def _value(v):
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    if isinstance(v, GeoPoint):
        return point_to_dict(v)
    if isinstance(v, GracePeriodDecision):
        return grace_to_dict(v)
    if isinstance(v, VehicleRequest):
        return vehicle_request_to_dict(v)
    if isinstance(v, DelayReport):
        return delay_report_to_dict(v)
    if isinstance(v, BreakdownReport):
        return breakdown_report_to_dict(v)
    if isinstance(v, WorkerMismatchReport):
        return mismatch_report_to_dict(v)
    if isinstance(v, tuple):
        return [_value(x) for x in v]
    return v


def event_to_dict(event: DomainEvent) -> dict:
    payload = {f.name: _value(getattr(event, f.name)) for f in fields(event)}
    return {"kind": event.kind, **payload}

"""TransportTask <-> JSON-compatible dict, lossless both ways.

History entries carry an ``entry_type`` tag so they can be rebuilt into the
right record type.
"""
from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import format_iso, parse_iso_datetime
from ..core.enums import (
    BreakdownSeverity,
    BreakdownType,
    MismatchReason,
    TripStatus,
    Urgency,
    VehicleRequestStatus,
    VehicleRequestType,
)
from ..core.exceptions import ValidationError
from ..escalation.model import AlternateVehicle, VehicleRequest
from ..geo.serializer import point_from_dict, point_to_dict, zone_from_dict, zone_to_dict
from ..grace.model import GracePeriodDecision
from ..timewindow.model import TimeWindow
from .model import (
    BreakdownReport,
    DelayReport,
    DropoffLocation,
    HistoryEntry,
    PickupLocation,
    StatusChange,
    TransportTask,
    WorkerManifestEntry,
    WorkerMismatch,
    WorkerMismatchReport,
)


def grace_to_dict(grace: GracePeriodDecision) -> dict:
    return {
        "grace_period_minutes": grace.grace_period_minutes,
        "auto_approved": grace.auto_approved,
        "requires_approval": grace.requires_approval,
    }


def grace_from_dict(data: dict) -> GracePeriodDecision:
    return GracePeriodDecision(
        grace_period_minutes=data["grace_period_minutes"],
        auto_approved=bool(data["auto_approved"]),
        requires_approval=bool(data["requires_approval"]),
    )


def vehicle_request_to_dict(req: VehicleRequest) -> dict:
    alt = req.alternate_vehicle
    return {
        "request_id": req.request_id,
        "task_id": req.task_id,
        "request_type": req.request_type.value,
        "urgency": req.urgency.value,
        "reason": req.reason,
        "status": req.status.value,
        "requested_at": format_iso(req.requested_at),
        "automatic": req.automatic,
        "alternate_vehicle": None if alt is None else {
            "vehicle_id": alt.vehicle_id,
            "plate_number": alt.plate_number,
            "estimated_arrival": format_iso(alt.estimated_arrival),
        },
        "resolution_note": req.resolution_note,
    }


def vehicle_request_from_dict(data: dict) -> VehicleRequest:
    alt = data.get("alternate_vehicle")
    return VehicleRequest(
        request_id=data["request_id"],
        task_id=data["task_id"],
        request_type=VehicleRequestType(data["request_type"]),
        urgency=Urgency(data["urgency"]),
        reason=data["reason"],
        status=VehicleRequestStatus(data["status"]),
        requested_at=parse_iso_datetime(data["requested_at"]),
        automatic=bool(data.get("automatic", False)),
        alternate_vehicle=None if alt is None else AlternateVehicle(
            vehicle_id=alt["vehicle_id"],
            plate_number=alt.get("plate_number"),
            estimated_arrival=parse_iso_datetime(alt.get("estimated_arrival")),
        ),
        resolution_note=data.get("resolution_note"),
    )


def delay_report_to_dict(report: DelayReport) -> dict:
    return {
        "task_id": report.task_id,
        "reason": report.reason,
        "estimated_delay": report.estimated_delay,
        "location": point_to_dict(report.location),
        "description": report.description,
        "timestamp": format_iso(report.timestamp),
        "grace": grace_to_dict(report.grace),
    }


def breakdown_report_to_dict(report: BreakdownReport) -> dict:
    return {
        "task_id": report.task_id,
        "breakdown_type": report.breakdown_type.value,
        "severity": report.severity.value,
        "location": point_to_dict(report.location),
        "description": report.description,
        "assistance_required": report.assistance_required,
        "timestamp": format_iso(report.timestamp),
    }


def mismatch_report_to_dict(report: WorkerMismatchReport) -> dict:
    return {
        "task_id": report.task_id,
        "location_id": report.location_id,
        "expected_workers": report.expected_workers,
        "actual_workers": report.actual_workers,
        "mismatches": [
            {"worker_id": m.worker_id, "reason": m.reason.value, "remarks": m.remarks}
            for m in report.mismatches
        ],
        "timestamp": format_iso(report.timestamp),
    }


def _status_change_to_dict(change: StatusChange) -> dict:
    return {
        "task_id": change.task_id,
        "from_status": change.from_status.value,
        "to_status": change.to_status.value,
        "location": point_to_dict(change.location),
        "timestamp": format_iso(change.timestamp),
        "notes": change.notes,
        "overridden": change.overridden,
        "exceptions": list(change.exceptions),
    }


def history_entry_to_dict(entry: HistoryEntry) -> dict:
    if isinstance(entry, StatusChange):
        return {"entry_type": "status_change", **_status_change_to_dict(entry)}
    if isinstance(entry, DelayReport):
        return {"entry_type": "delay", **delay_report_to_dict(entry)}
    if isinstance(entry, BreakdownReport):
        return {"entry_type": "breakdown", **breakdown_report_to_dict(entry)}
    if isinstance(entry, WorkerMismatchReport):
        return {"entry_type": "worker_mismatch", **mismatch_report_to_dict(entry)}
    raise ValidationError(f"Unknown history entry {type(entry).__name__}")


def history_entry_from_dict(data: dict) -> HistoryEntry:
    entry_type = data.get("entry_type")
    if entry_type == "status_change":
        return StatusChange(
            task_id=data["task_id"],
            from_status=TripStatus(data["from_status"]),
            to_status=TripStatus(data["to_status"]),
            location=point_from_dict(data["location"]),
            timestamp=parse_iso_datetime(data["timestamp"]),
            notes=data.get("notes"),
            overridden=bool(data.get("overridden", False)),
            exceptions=tuple(data.get("exceptions") or ()),
        )
    if entry_type == "delay":
        return DelayReport(
            task_id=data["task_id"],
            reason=data["reason"],
            estimated_delay=data["estimated_delay"],
            location=point_from_dict(data["location"]),
            description=data.get("description", ""),
            timestamp=parse_iso_datetime(data["timestamp"]),
            grace=grace_from_dict(data["grace"]),
        )
    if entry_type == "breakdown":
        return BreakdownReport(
            task_id=data["task_id"],
            breakdown_type=BreakdownType(data["breakdown_type"]),
            severity=BreakdownSeverity(data["severity"]),
            location=point_from_dict(data["location"]),
            description=data["description"],
            assistance_required=bool(data.get("assistance_required", False)),
            timestamp=parse_iso_datetime(data["timestamp"]),
        )
    if entry_type == "worker_mismatch":
        return WorkerMismatchReport(
            task_id=data["task_id"],
            location_id=data["location_id"],
            expected_workers=data["expected_workers"],
            actual_workers=data["actual_workers"],
            mismatches=tuple(
                WorkerMismatch(worker_id=m["worker_id"], reason=MismatchReason(m["reason"]), remarks=m.get("remarks", ""))
                for m in data.get("mismatches") or ()
            ),
            timestamp=parse_iso_datetime(data["timestamp"]),
        )
    raise ValidationError(f"Unknown history entry type '{entry_type}'")


def _pickup_to_dict(p: PickupLocation) -> dict:
    return {
        "location_id": p.location_id,
        "name": p.name,
        "estimated_pickup_time": format_iso(p.estimated_pickup_time),
        "time_window": None if p.time_window is None else {"window_minutes": p.time_window.window_minutes},
        "geofence": zone_to_dict(p.geofence),
        "workers": [
            {
                "worker_id": w.worker_id,
                "name": w.name,
                "checked_in": w.checked_in,
                "check_in_time": format_iso(w.check_in_time),
            }
            for w in p.workers
        ],
        "actual_pickup_time": format_iso(p.actual_pickup_time),
    }


def _pickup_from_dict(data: dict) -> PickupLocation:
    window = data.get("time_window")
    return PickupLocation(
        location_id=data["location_id"],
        name=data["name"],
        estimated_pickup_time=parse_iso_datetime(data["estimated_pickup_time"]),
        time_window=None if window is None else TimeWindow(window_minutes=window["window_minutes"]),
        geofence=zone_from_dict(data.get("geofence")),
        workers=tuple(
            WorkerManifestEntry(
                worker_id=w["worker_id"],
                name=w["name"],
                checked_in=bool(w.get("checked_in", False)),
                check_in_time=parse_iso_datetime(w.get("check_in_time")),
            )
            for w in data.get("workers") or ()
        ),
        actual_pickup_time=parse_iso_datetime(data.get("actual_pickup_time")),
    )


def _dropoff_to_dict(d: DropoffLocation) -> dict:
    return {
        "name": d.name,
        "geofence": zone_to_dict(d.geofence),
        "estimated_arrival": format_iso(d.estimated_arrival),
        "actual_arrival": format_iso(d.actual_arrival),
    }


def _dropoff_from_dict(data: dict) -> DropoffLocation:
    return DropoffLocation(
        name=data["name"],
        geofence=zone_from_dict(data.get("geofence")),
        estimated_arrival=parse_iso_datetime(data.get("estimated_arrival")),
        actual_arrival=parse_iso_datetime(data.get("actual_arrival")),
    )


def task_to_dict(task: TransportTask) -> dict:
    current: Optional[VehicleRequest] = task.vehicle_request
    return {
        "task_id": task.task_id,
        "driver_id": task.driver_id,
        "route": task.route,
        "status": task.status.value,
        "pickup_locations": [_pickup_to_dict(p) for p in task.pickup_locations],
        "dropoff_location": _dropoff_to_dict(task.dropoff_location),
        # Derived from the manifests; informational for readers of the dict.
        "total_workers": task.total_workers,
        "checked_in_workers": task.checked_in_workers,
        "vehicle_request_id": current.request_id if current else None,
        "vehicle_requests": [vehicle_request_to_dict(r) for r in task.vehicle_requests],
        "history": [history_entry_to_dict(h) for h in task.history],
    }


def task_from_dict(data: dict) -> TransportTask:
    return TransportTask(
        task_id=data["task_id"],
        driver_id=data.get("driver_id"),
        route=data.get("route"),
        status=TripStatus(data["status"]),
        pickup_locations=tuple(_pickup_from_dict(p) for p in data.get("pickup_locations") or ()),
        dropoff_location=_dropoff_from_dict(data["dropoff_location"]),
        vehicle_requests=tuple(vehicle_request_from_dict(r) for r in data.get("vehicle_requests") or ()),
        history=tuple(history_entry_from_dict(h) for h in data.get("history") or ()),
    )

import math
from datetime import datetime
from itertools import count

import pytest

from src.fieldops_compliance.fieldops_compliance.core.constants import EARTH_RADIUS_M
from src.fieldops_compliance.fieldops_compliance.core.enums import (
    BreakdownSeverity,
    BreakdownType,
    TripStatus,
    Urgency,
    VehicleRequestStatus,
    VehicleRequestType,
)
from src.fieldops_compliance.fieldops_compliance.core.exceptions import (
    GuardFailure,
    LocationUnavailableError,
    PreconditionError,
    ValidationError,
)
from src.fieldops_compliance.fieldops_compliance.escalation.model import AlternateVehicle
from src.fieldops_compliance.fieldops_compliance.escalation.policy import EscalationPolicy
from src.fieldops_compliance.fieldops_compliance.events.model import (
    BreakdownReported,
    DelayReported,
    StatusUpdated,
    VehicleRequested,
    VehicleRequestUpdated,
)
from src.fieldops_compliance.fieldops_compliance.geo.model import GeofenceZone, GeoPoint
from src.fieldops_compliance.fieldops_compliance.timewindow.model import TimeWindow
from src.fieldops_compliance.fieldops_compliance.trips.machine import TripStatusMachine, allowed_next
from src.fieldops_compliance.fieldops_compliance.trips.model import (
    DelayReport,
    DropoffLocation,
    PickupLocation,
    StatusChange,
    TransportTask,
)


CAMP = GeoPoint(latitude=10.8231, longitude=106.6297)
SITE = GeoPoint(latitude=10.7769, longitude=106.7009)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 3, hour, minute)


def north_of(point: GeoPoint, meters: float) -> GeoPoint:
    return GeoPoint(latitude=point.latitude + math.degrees(meters / EARTH_RADIUS_M), longitude=point.longitude)


def make_task(status=TripStatus.PENDING) -> TransportTask:
    return TransportTask(
        task_id=1,
        status=status,
        driver_id=7,
        pickup_locations=(
            PickupLocation(
                location_id=10,
                name="Camp",
                estimated_pickup_time=at(8, 30),
                time_window=TimeWindow(window_minutes=15),
                geofence=GeofenceZone(center=CAMP, radius_meters=100, allowed_variance_meters=20),
            ),
        ),
        dropoff_location=DropoffLocation(name="Site", geofence=GeofenceZone(center=SITE, radius_meters=150)),
    )


def make_machine() -> TripStatusMachine:
    ids = count(1)
    return TripStatusMachine(escalation=EscalationPolicy(id_factory=lambda: f"req-{next(ids)}"))


def test_allowed_next_follows_fixed_order():
    assert allowed_next(TripStatus.PENDING) == TripStatus.EN_ROUTE_PICKUP
    assert allowed_next(TripStatus.EN_ROUTE_DROPOFF) == TripStatus.COMPLETED
    assert allowed_next(TripStatus.COMPLETED) is None


def test_full_trip_inside_all_guards():
    machine = make_machine()
    task = make_task()
    task = machine.advance(task, TripStatus.EN_ROUTE_PICKUP, now=at(8, 0), location=CAMP).task
    task = machine.advance(task, TripStatus.PICKUP_COMPLETE, now=at(8, 35), location=north_of(CAMP, 115)).task
    task = machine.advance(task, TripStatus.EN_ROUTE_DROPOFF, now=at(8, 40), location=CAMP).task
    result = machine.advance(task, TripStatus.COMPLETED, now=at(9, 30), location=SITE, notes="  all good ")
    task = result.task

    assert task.status == TripStatus.COMPLETED
    assert [h.to_status for h in task.history] == [
        TripStatus.EN_ROUTE_PICKUP,
        TripStatus.PICKUP_COMPLETE,
        TripStatus.EN_ROUTE_DROPOFF,
        TripStatus.COMPLETED,
    ]
    assert not any(h.overridden for h in task.history)
    assert task.pickup_locations[0].actual_pickup_time == at(8, 35)
    assert task.dropoff_location.actual_arrival == at(9, 30)
    assert task.history[-1].notes == "all good"
    event = result.events[0]
    assert isinstance(event, StatusUpdated)
    assert event.from_status == TripStatus.EN_ROUTE_DROPOFF
    assert not event.requires_review


def test_skipping_a_status_is_rejected():
    task = make_task()
    with pytest.raises(PreconditionError, match="next status is en_route_pickup"):
        make_machine().advance(task, TripStatus.PICKUP_COMPLETE, now=at(8, 0), location=CAMP)
    assert task.status == TripStatus.PENDING
    assert task.history == ()


def test_going_backwards_is_rejected():
    with pytest.raises(PreconditionError):
        make_machine().advance(make_task(TripStatus.PICKUP_COMPLETE), TripStatus.EN_ROUTE_PICKUP, now=at(9), location=CAMP)


def test_completed_is_terminal():
    with pytest.raises(PreconditionError, match="already completed"):
        make_machine().advance(make_task(TripStatus.COMPLETED), TripStatus.COMPLETED, now=at(9), location=SITE)


def test_unknown_status_is_validation_error():
    with pytest.raises(ValidationError):
        make_machine().advance(make_task(), "teleported", now=at(8), location=CAMP)


def test_status_update_needs_location():
    with pytest.raises(LocationUnavailableError):
        make_machine().advance(make_task(), TripStatus.EN_ROUTE_PICKUP, now=at(8), location=None)


def test_pickup_outside_geofence_and_window_fails_with_all_checks():
    task = make_task(TripStatus.EN_ROUTE_PICKUP)
    with pytest.raises(GuardFailure) as exc:
        make_machine().advance(task, TripStatus.PICKUP_COMPLETE, now=at(9, 0), location=north_of(CAMP, 125))
    err = exc.value
    assert err.overridable
    assert err.target == TripStatus.PICKUP_COMPLETE.value
    assert [c.name for c in err.checks] == ["time_window:Camp", "geofence:Camp"]


def test_override_forces_transition_and_flags_review():
    task = make_task(TripStatus.EN_ROUTE_PICKUP)
    result = make_machine().advance(
        task, TripStatus.PICKUP_COMPLETE, now=at(9, 0), location=north_of(CAMP, 125), override=True
    )
    change = result.task.history[-1]
    assert isinstance(change, StatusChange)
    assert result.task.status == TripStatus.PICKUP_COMPLETE
    assert change.overridden
    assert change.requires_review
    assert len(change.exceptions) == 2
    assert result.events[0].overridden and result.events[0].requires_review


def test_override_without_failed_guard_is_not_flagged():
    result = make_machine().advance(
        make_task(TripStatus.EN_ROUTE_PICKUP), TripStatus.PICKUP_COMPLETE, now=at(8, 30), location=CAMP, override=True
    )
    assert not result.task.history[-1].overridden


def test_dropoff_outside_geofence_fails():
    with pytest.raises(GuardFailure) as exc:
        make_machine().advance(make_task(TripStatus.EN_ROUTE_DROPOFF), TripStatus.COMPLETED, now=at(9, 30), location=CAMP)
    assert exc.value.checks[0].name == "geofence:Site"


def test_explicit_pickup_stop_must_belong_to_trip():
    with pytest.raises(ValidationError):
        make_machine().advance(
            make_task(TripStatus.EN_ROUTE_PICKUP),
            TripStatus.PICKUP_COMPLETE,
            now=at(8, 30),
            location=CAMP,
            pickup_location_id=99,
        )


def test_report_delay_appends_history_without_moving_status():
    task = make_task(TripStatus.EN_ROUTE_PICKUP)
    outcome = make_machine().report_delay(
        task, reason="mechanical", estimated_minutes=45, location=CAMP, description="Flat tyre", now=at(8, 10)
    )
    assert outcome.task.status == TripStatus.EN_ROUTE_PICKUP
    assert isinstance(outcome.task.history[-1], DelayReport)
    assert outcome.grace.grace_period_minutes == 45
    assert outcome.grace.requires_approval
    assert outcome.vehicle_replacement_suggested
    assert isinstance(outcome.events[0], DelayReported)


def test_short_traffic_delay_is_auto_approved():
    outcome = make_machine().report_delay(
        make_task(), reason="traffic", estimated_minutes=10, location=CAMP, now=at(8, 10)
    )
    assert outcome.grace.auto_approved
    assert not outcome.vehicle_replacement_suggested


@pytest.mark.parametrize(
    "status,reason,minutes,location,error",
    [
        (TripStatus.PENDING, "", 10, CAMP, ValidationError),
        (TripStatus.PENDING, "traffic", 0, CAMP, ValidationError),
        (TripStatus.PENDING, "traffic", math.nan, CAMP, ValidationError),
        (TripStatus.PENDING, "traffic", math.inf, CAMP, ValidationError),
        (TripStatus.COMPLETED, "traffic", 10, CAMP, PreconditionError),
        (TripStatus.PENDING, "traffic", 10, None, LocationUnavailableError),
        # Input errors are reported before state errors.
        (TripStatus.COMPLETED, "", 10, None, ValidationError),
    ],
)
def test_report_delay_errors(status, reason, minutes, location, error):
    with pytest.raises(error):
        make_machine().report_delay(
            make_task(status), reason=reason, estimated_minutes=minutes, location=location, now=at(8, 10)
        )


def breakdown(machine, task, severity):
    return machine.report_breakdown(
        task,
        breakdown_type=BreakdownType.MECHANICAL,
        severity=severity,
        location=CAMP,
        description="Engine failure",
        assistance_required=True,
        now=at(8, 20),
    )


def test_minor_breakdown_only_records():
    outcome = breakdown(make_machine(), make_task(TripStatus.EN_ROUTE_PICKUP), BreakdownSeverity.MINOR)
    assert outcome.vehicle_request is None
    assert outcome.task.vehicle_requests == ()
    assert [type(e) for e in outcome.events] == [BreakdownReported]


def test_critical_breakdown_supersedes_major_request():
    machine = make_machine()
    task = make_task(TripStatus.EN_ROUTE_PICKUP)
    first = breakdown(machine, task, BreakdownSeverity.MAJOR)
    assert first.vehicle_request.request_type == VehicleRequestType.REPLACEMENT

    second = breakdown(machine, first.task, BreakdownSeverity.CRITICAL)
    requests = second.task.vehicle_requests
    assert [r.status for r in requests] == [VehicleRequestStatus.REJECTED, VehicleRequestStatus.PENDING]
    assert requests[1].request_type == VehicleRequestType.EMERGENCY
    assert second.task.vehicle_request == requests[1]
    requested = second.events[-1]
    assert isinstance(requested, VehicleRequested)
    assert requested.superseded_request_id == first.vehicle_request.request_id


def test_breakdown_needs_description_and_location():
    machine = make_machine()
    with pytest.raises(ValidationError):
        machine.report_breakdown(
            make_task(), breakdown_type="mechanical", severity="major", location=CAMP, description="", now=at(8)
        )
    with pytest.raises(ValidationError):
        machine.report_breakdown(
            make_task(), breakdown_type="mechanical", severity="severe", location=CAMP, description="x", now=at(8)
        )
    with pytest.raises(LocationUnavailableError):
        machine.report_breakdown(
            make_task(), breakdown_type="mechanical", severity="major", location=None, description="x", now=at(8)
        )


def test_manual_request_blocked_by_more_urgent_open_request():
    machine = make_machine()
    task = breakdown(machine, make_task(TripStatus.EN_ROUTE_PICKUP), BreakdownSeverity.MAJOR).task
    with pytest.raises(PreconditionError):
        machine.request_vehicle(
            task, request_type=VehicleRequestType.ADDITIONAL, reason="Extra workers", urgency=Urgency.MEDIUM, now=at(8, 30)
        )


def test_vehicle_request_lifecycle_on_task():
    machine = make_machine()
    task = machine.request_vehicle(
        make_task(TripStatus.EN_ROUTE_PICKUP),
        request_type=VehicleRequestType.ADDITIONAL,
        reason="Extra workers",
        urgency=Urgency.MEDIUM,
        now=at(8, 0),
    ).task
    request_id = task.vehicle_request.request_id

    alt = AlternateVehicle(vehicle_id=4, plate_number="51B-999.01")
    approved = machine.approve_vehicle_request(task, request_id=request_id, now=at(8, 5), alternate_vehicle=alt)
    assert approved.task.vehicle_request.alternate_vehicle == alt
    assert approved.events == (
        VehicleRequestUpdated(task_id=1, request_id=request_id, status=VehicleRequestStatus.APPROVED, timestamp=at(8, 5)),
    )

    fulfilled = machine.fulfill_vehicle_request(approved.task, request_id=request_id, now=at(8, 40))
    assert fulfilled.task.vehicle_request.status == VehicleRequestStatus.FULFILLED

    with pytest.raises(ValidationError):
        machine.reject_vehicle_request(fulfilled.task, request_id="missing", note="n/a", now=at(9))


def test_completed_trip_rejects_side_channels():
    machine = make_machine()
    task = make_task(TripStatus.COMPLETED)
    with pytest.raises(PreconditionError):
        breakdown(machine, task, BreakdownSeverity.MAJOR)
    with pytest.raises(PreconditionError):
        machine.request_vehicle(
            task, request_type=VehicleRequestType.REPLACEMENT, reason="x", urgency=Urgency.LOW, now=at(9)
        )

from dataclasses import replace
from datetime import datetime

import pytest

from src.fieldops_compliance.fieldops_compliance.core.enums import MismatchReason, TripStatus
from src.fieldops_compliance.fieldops_compliance.core.exceptions import (
    GuardFailure,
    LocationUnavailableError,
    PreconditionError,
    ValidationError,
)
from src.fieldops_compliance.fieldops_compliance.events.model import WorkerCheckedIn, WorkerCountMismatchRecorded
from src.fieldops_compliance.fieldops_compliance.geo.model import GeofenceZone, GeoPoint
from src.fieldops_compliance.fieldops_compliance.trips.machine import TripStatusMachine
from src.fieldops_compliance.fieldops_compliance.trips.model import (
    DropoffLocation,
    PickupLocation,
    TransportTask,
    WorkerManifestEntry,
    WorkerMismatch,
    WorkerMismatchReport,
)


CAMP = GeoPoint(latitude=10.8231, longitude=106.6297)
SOUTH_CAMP = GeoPoint(latitude=10.7626, longitude=106.6602)
NOW = datetime(2025, 3, 3, 8, 20)


def make_task(status=TripStatus.EN_ROUTE_PICKUP) -> TransportTask:
    return TransportTask(
        task_id=5,
        status=status,
        pickup_locations=(
            PickupLocation(
                location_id=1,
                name="North camp",
                estimated_pickup_time=datetime(2025, 3, 3, 8, 30),
                workers=tuple(WorkerManifestEntry(worker_id=i, name=f"Worker {i}") for i in (1, 2, 3)),
            ),
            PickupLocation(
                location_id=2,
                name="South camp",
                estimated_pickup_time=datetime(2025, 3, 3, 8, 50),
                workers=(WorkerManifestEntry(worker_id=4, name="Worker 4"),),
            ),
        ),
        dropoff_location=DropoffLocation(name="Site"),
    )


def check_in(task, worker_id, location_id=1):
    return TripStatusMachine().check_in_worker(task, location_id=location_id, worker_id=worker_id, now=NOW, location=CAMP)


def test_worker_counts_are_derived_from_manifest():
    task = make_task()
    assert task.total_workers == 4
    assert task.checked_in_workers == 0

    result = check_in(task, 2)
    assert result.task.checked_in_workers == 1
    assert result.task.pickup_locations[0].find_worker(2).check_in_time == NOW
    assert result.events == (WorkerCheckedIn(task_id=5, location_id=1, worker_id=2, timestamp=NOW),)


def test_check_in_only_while_en_route_to_pickup():
    with pytest.raises(PreconditionError):
        check_in(make_task(TripStatus.PENDING), 1)
    with pytest.raises(PreconditionError):
        check_in(make_task(TripStatus.PICKUP_COMPLETE), 1)


def test_check_in_errors():
    task = check_in(make_task(), 1).task
    with pytest.raises(PreconditionError, match="already checked in"):
        check_in(task, 1)
    with pytest.raises(ValidationError):
        check_in(task, 4, location_id=1)
    with pytest.raises(ValidationError):
        check_in(task, 1, location_id=9)
    with pytest.raises(LocationUnavailableError):
        TripStatusMachine().check_in_worker(task, location_id=1, worker_id=2, now=NOW, location=None)


def test_mismatch_report_lists_every_missing_worker():
    task = check_in(make_task(), 1).task
    result = TripStatusMachine().record_worker_mismatch(
        task,
        location_id=1,
        mismatches=[
            WorkerMismatch(worker_id=2, reason=MismatchReason.MEDICAL),
            WorkerMismatch(worker_id=3, reason="other", remarks="  Went home early "),
        ],
        now=NOW,
    )
    report = result.task.history[-1]
    assert isinstance(report, WorkerMismatchReport)
    assert report.expected_workers == 3
    assert report.actual_workers == 1
    assert report.mismatches[1] == WorkerMismatch(worker_id=3, reason=MismatchReason.OTHER, remarks="Went home early")
    assert isinstance(result.events[0], WorkerCountMismatchRecorded)
    assert result.task.status == TripStatus.EN_ROUTE_PICKUP


@pytest.mark.parametrize(
    "mismatches",
    [
        [WorkerMismatch(worker_id=2, reason=MismatchReason.ABSENT)],
        [
            WorkerMismatch(worker_id=2, reason=MismatchReason.ABSENT),
            WorkerMismatch(worker_id=3, reason=MismatchReason.OTHER),
        ],
        [
            WorkerMismatch(worker_id=2, reason=MismatchReason.ABSENT),
            WorkerMismatch(worker_id=2, reason=MismatchReason.SHIFTED),
            WorkerMismatch(worker_id=3, reason=MismatchReason.SHIFTED),
        ],
        [
            WorkerMismatch(worker_id=1, reason=MismatchReason.ABSENT),
            WorkerMismatch(worker_id=2, reason=MismatchReason.ABSENT),
            WorkerMismatch(worker_id=3, reason=MismatchReason.ABSENT),
        ],
        [
            WorkerMismatch(worker_id=2, reason="sleeping"),
            WorkerMismatch(worker_id=3, reason=MismatchReason.ABSENT),
        ],
    ],
)
def test_invalid_mismatch_reports(mismatches):
    task = check_in(make_task(), 1).task
    with pytest.raises(ValidationError):
        TripStatusMachine().record_worker_mismatch(task, location_id=1, mismatches=mismatches, now=NOW)


def test_no_mismatch_when_everyone_is_aboard():
    task = check_in(make_task(), 4, location_id=2).task
    with pytest.raises(ValidationError, match="No worker count mismatch"):
        TripStatusMachine().record_worker_mismatch(task, location_id=2, mismatches=[], now=NOW)


def test_mismatch_not_allowed_after_leaving_pickup():
    with pytest.raises(PreconditionError):
        TripStatusMachine().record_worker_mismatch(
            make_task(TripStatus.EN_ROUTE_DROPOFF), location_id=1, mismatches=[], now=NOW
        )


def board_everyone(task):
    for worker_id in (1, 2, 3):
        task = check_in(task, worker_id).task
    return check_in(task, 4, location_id=2).task


def test_pickup_blocked_until_a_worker_is_aboard():
    machine = TripStatusMachine()
    for override in (False, True):
        with pytest.raises(GuardFailure) as exc:
            machine.advance(make_task(), TripStatus.PICKUP_COMPLETE, now=NOW, location=CAMP, override=override)
        assert not exc.value.overridable
        assert [c.name for c in exc.value.checks] == ["worker_count:North camp", "worker_count:South camp"]
        assert "No workers checked in at North camp" in exc.value.message


def test_partial_check_in_needs_override_and_is_flagged():
    task = check_in(check_in(make_task(), 1).task, 4, location_id=2).task
    machine = TripStatusMachine()

    with pytest.raises(GuardFailure) as exc:
        machine.advance(task, TripStatus.PICKUP_COMPLETE, now=NOW, location=CAMP)
    assert exc.value.overridable
    assert [c.name for c in exc.value.checks] == ["worker_count:North camp"]

    result = machine.advance(task, TripStatus.PICKUP_COMPLETE, now=NOW, location=CAMP, override=True)
    change = result.task.history[-1]
    assert result.task.status == TripStatus.PICKUP_COMPLETE
    assert change.requires_review
    assert change.exceptions == ("worker_count:North camp: 2 worker(s) not checked in at North camp (1/3)",)
    assert result.events[0].requires_review


def test_pickup_complete_stamps_every_stop():
    result = TripStatusMachine().advance(board_everyone(make_task()), TripStatus.PICKUP_COMPLETE, now=NOW, location=CAMP)
    assert [p.actual_pickup_time for p in result.task.pickup_locations] == [NOW, NOW]
    assert not result.task.history[-1].overridden


def test_location_guards_cover_every_open_stop_unless_one_is_named():
    task = board_everyone(make_task())
    north, south = task.pickup_locations
    task = replace(
        task,
        pickup_locations=(
            replace(north, geofence=GeofenceZone(center=CAMP, radius_meters=100)),
            replace(south, geofence=GeofenceZone(center=SOUTH_CAMP, radius_meters=100)),
        ),
    )
    machine = TripStatusMachine()

    with pytest.raises(GuardFailure) as exc:
        machine.advance(task, TripStatus.PICKUP_COMPLETE, now=NOW, location=SOUTH_CAMP)
    assert [c.name for c in exc.value.checks] == ["geofence:North camp"]

    result = machine.advance(task, TripStatus.PICKUP_COMPLETE, now=NOW, location=SOUTH_CAMP, pickup_location_id=2)
    assert not result.task.history[-1].overridden
    assert [p.actual_pickup_time for p in result.task.pickup_locations] == [NOW, NOW]


def test_stops_already_picked_up_are_not_guarded_again():
    task = make_task()
    north, south = task.pickup_locations
    earlier = datetime(2025, 3, 3, 8, 0)
    task = replace(task, pickup_locations=(replace(north, actual_pickup_time=earlier), south))
    task = check_in(task, 4, location_id=2).task

    result = TripStatusMachine().advance(task, TripStatus.PICKUP_COMPLETE, now=NOW, location=CAMP)
    assert [p.actual_pickup_time for p in result.task.pickup_locations] == [earlier, NOW]

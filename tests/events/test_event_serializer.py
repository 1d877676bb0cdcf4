import json
from datetime import date, datetime

from src.fieldops_compliance.fieldops_compliance.core.enums import TripStatus
from src.fieldops_compliance.fieldops_compliance.events.model import SessionClockedIn, StatusUpdated
from src.fieldops_compliance.fieldops_compliance.events.serializer import event_to_dict
from src.fieldops_compliance.fieldops_compliance.geo.model import GeoPoint
from src.fieldops_compliance.fieldops_compliance.trips.machine import TripStatusMachine
from src.fieldops_compliance.fieldops_compliance.trips.model import DropoffLocation, TransportTask


HERE = GeoPoint(latitude=10.0, longitude=106.0)


def test_status_updated_to_dict():
    event = StatusUpdated(
        task_id=1,
        from_status=TripStatus.PENDING,
        to_status=TripStatus.EN_ROUTE_PICKUP,
        location=HERE,
        timestamp=datetime(2025, 3, 3, 8, 0),
        exceptions=("geofence:Camp: outside",),
    )
    assert event_to_dict(event) == {
        "kind": "status_updated",
        "task_id": 1,
        "from_status": "pending",
        "to_status": "en_route_pickup",
        "location": {"latitude": 10.0, "longitude": 106.0, "accuracy": None},
        "timestamp": "2025-03-03T08:00:00",
        "overridden": False,
        "requires_review": False,
        "exceptions": ["geofence:Camp: outside"],
    }


def test_session_event_dates_are_iso():
    event = SessionClockedIn(
        driver_id=7, work_date=date(2025, 3, 3), vehicle_id=3, check_in_time=datetime(2025, 3, 3, 7, 45), late_login=False
    )
    data = event_to_dict(event)
    assert data["kind"] == "session_clocked_in"
    assert data["work_date"] == "2025-03-03"


def test_nested_reports_are_json_compatible():
    task = TransportTask(task_id=2, status=TripStatus.EN_ROUTE_PICKUP, pickup_locations=(), dropoff_location=DropoffLocation(name="Site"))
    outcome = TripStatusMachine().report_delay(
        task, reason="weather", estimated_minutes=35, location=HERE, now=datetime(2025, 3, 3, 8, 0)
    )
    data = json.loads(json.dumps(event_to_dict(outcome.events[0])))
    assert data["kind"] == "delay_reported"
    assert data["grace"] == {"grace_period_minutes": 35, "auto_approved": False, "requires_approval": True}
    assert data["report"]["reason"] == "weather"
    assert data["vehicle_replacement_suggested"] is True

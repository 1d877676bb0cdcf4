"""Example: drive one shift and one trip through the service layer.

Repositories and the event publisher are host collaborators; this script
keeps everything in memory and prints the emitted events.
"""

import json
from datetime import date, datetime, timedelta
from typing import Optional

from src.fieldops_compliance.fieldops_compliance.attendance.model import AttendanceSession
from src.fieldops_compliance.fieldops_compliance.core.enums import SessionStatus, TripStatus
from src.fieldops_compliance.fieldops_compliance.events.serializer import event_to_dict
from src.fieldops_compliance.fieldops_compliance.geo.model import GeofenceZone, GeoPoint
from src.fieldops_compliance.fieldops_compliance.main import create_engine
from src.fieldops_compliance.fieldops_compliance.timewindow.model import TimeWindow
from src.fieldops_compliance.fieldops_compliance.trips.model import (
    DropoffLocation,
    PickupLocation,
    TransportTask,
    WorkerManifestEntry,
)


class MemorySessions:
    def __init__(self):
        self._rows: dict[tuple[int, date], AttendanceSession] = {}

    def get_for_driver_and_date(self, driver_id: int, work_date: date) -> Optional[AttendanceSession]:
        return self._rows.get((driver_id, work_date))

    def get_open_for_driver(self, driver_id: int) -> Optional[AttendanceSession]:
        for (d, _), s in self._rows.items():
            if d == driver_id and s.status == SessionStatus.CHECKED_IN:
                return s
        return None

    def save(self, session: AttendanceSession) -> None:
        self._rows[(session.driver_id, session.work_date)] = session


class MemoryTasks:
    def __init__(self, *tasks: TransportTask):
        self._rows = {t.task_id: t for t in tasks}

    def get_by_id(self, task_id: int) -> Optional[TransportTask]:
        return self._rows.get(task_id)

    def save(self, task: TransportTask) -> None:
        self._rows[task.task_id] = task


class PrintPublisher:
    def publish(self, events):
        for e in events:
            print(json.dumps(event_to_dict(e)))


def main():
    day = datetime(2025, 3, 3)
    site = GeoPoint(latitude=10.7769, longitude=106.7009)
    camp = GeoPoint(latitude=10.8231, longitude=106.6297)

    task = TransportTask(
        task_id=1,
        status=TripStatus.PENDING,
        driver_id=7,
        pickup_locations=(
            PickupLocation(
                location_id=1,
                name="Worker camp",
                estimated_pickup_time=day.replace(hour=8, minute=30),
                time_window=TimeWindow(window_minutes=15),
                geofence=GeofenceZone(center=camp, radius_meters=100, allowed_variance_meters=20),
                workers=(WorkerManifestEntry(worker_id=1, name="An"), WorkerManifestEntry(worker_id=2, name="Binh")),
            ),
        ),
        dropoff_location=DropoffLocation(name="Site A", geofence=GeofenceZone(center=site, radius_meters=150)),
    )

    engine = create_engine(sessions=MemorySessions(), tasks=MemoryTasks(task), publisher=PrintPublisher())
    attendance = engine.attendance_service
    trips = engine.trip_service

    attendance.clock_in(7, vehicle_id=3, location=camp, pre_check_completed=True, mileage=1200, now=day.replace(hour=7, minute=50))

    trips.advance_status(1, TripStatus.EN_ROUTE_PICKUP, location=camp, now=day.replace(hour=8, minute=0))
    for worker_id in (1, 2):
        trips.check_in_worker(1, location_id=1, worker_id=worker_id, location=camp, now=day.replace(hour=8, minute=25))
    trips.advance_status(1, TripStatus.PICKUP_COMPLETE, location=camp, now=day.replace(hour=8, minute=35))
    trips.report_delay(1, reason="traffic", estimated_minutes=10, location=camp, now=day.replace(hour=8, minute=50))
    trips.advance_status(1, TripStatus.EN_ROUTE_DROPOFF, location=camp, now=day.replace(hour=8, minute=55))
    trips.advance_status(1, TripStatus.COMPLETED, location=site, now=day.replace(hour=9, minute=40))

    attendance.clock_out(
        7,
        location=site,
        post_check_completed=True,
        mileage=1264,
        fuel_level=55,
        now=day.replace(hour=17, minute=10),
    )
    print(attendance.forgotten_checkout_status(7, now=day + timedelta(hours=20)))


if __name__ == "__main__":
    main()

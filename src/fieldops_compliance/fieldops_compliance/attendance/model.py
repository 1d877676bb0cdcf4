from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LogoutClassification, RegularizationStatus, SessionStatus
from ..geo.model import GeoPoint


@dataclass(frozen=True)
class RegularizationRequest:
    """Corrected checkout time awaiting supervisor review.

    The supervisor's decision is recorded by the host system; the closed
    session itself never changes again.
    """

    requested_checkout_time: datetime
    reason: str
    requested_at: datetime
    status: RegularizationStatus = RegularizationStatus.PENDING


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one driver's attendance for one calendar day.

    Invariant: check_out_time set => check_in_time set and
    check_out_time >= check_in_time. Immutable once CHECKED_OUT.
    """

    driver_id: int
    work_date: date
    status: SessionStatus = SessionStatus.NOT_LOGGED_IN
    assigned_vehicle_id: Optional[int] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    check_in_location: Optional[GeoPoint] = None
    check_out_location: Optional[GeoPoint] = None
    pre_check_completed: bool = False
    post_check_completed: bool = False
    start_mileage: Optional[float] = None
    end_mileage: Optional[float] = None
    fuel_level: Optional[float] = None
    total_hours: float = 0.0
    total_distance: float = 0.0
    late_login: bool = False
    logout_classification: Optional[LogoutClassification] = None
    lunch_start_time: Optional[datetime] = None
    lunch_end_time: Optional[datetime] = None
    late_lunch_start: bool = False
    late_lunch_end: bool = False
    irregular: bool = False
    irregular_reason: Optional[str] = None
    regularization: Optional[RegularizationRequest] = None

    @classmethod
    def open(cls, *, driver_id: int, work_date: date, assigned_vehicle_id: Optional[int] = None) -> "AttendanceSession":
        return cls(driver_id=driver_id, work_date=work_date, assigned_vehicle_id=assigned_vehicle_id)

    @property
    def is_closed(self) -> bool:
        return self.status == SessionStatus.CHECKED_OUT

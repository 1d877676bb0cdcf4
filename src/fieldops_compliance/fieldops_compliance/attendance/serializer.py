"""AttendanceSession <-> JSON-compatible dict, lossless both ways."""
from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import format_iso, parse_iso_date, parse_iso_datetime
from ..core.enums import LogoutClassification, RegularizationStatus, SessionStatus
from ..geo.serializer import point_from_dict, point_to_dict
from .model import AttendanceSession, RegularizationRequest


def _regularization_to_dict(req: Optional[RegularizationRequest]) -> Optional[dict]:
    if req is None:
        return None
    return {
        "requested_checkout_time": format_iso(req.requested_checkout_time),
        "reason": req.reason,
        "requested_at": format_iso(req.requested_at),
        "status": req.status.value,
    }


def _regularization_from_dict(data: Optional[dict]) -> Optional[RegularizationRequest]:
    if data is None:
        return None
    return RegularizationRequest(
        requested_checkout_time=parse_iso_datetime(data["requested_checkout_time"]),
        reason=data["reason"],
        requested_at=parse_iso_datetime(data["requested_at"]),
        status=RegularizationStatus(data["status"]),
    )


def session_to_dict(session: AttendanceSession) -> dict:
    return {
        "driver_id": session.driver_id,
        "work_date": session.work_date.isoformat(),
        "status": session.status.value,
        "assigned_vehicle_id": session.assigned_vehicle_id,
        "check_in_time": format_iso(session.check_in_time),
        "check_out_time": format_iso(session.check_out_time),
        "check_in_location": point_to_dict(session.check_in_location),
        "check_out_location": point_to_dict(session.check_out_location),
        "pre_check_completed": session.pre_check_completed,
        "post_check_completed": session.post_check_completed,
        "start_mileage": session.start_mileage,
        "end_mileage": session.end_mileage,
        "fuel_level": session.fuel_level,
        "total_hours": session.total_hours,
        "total_distance": session.total_distance,
        "late_login": session.late_login,
        "logout_classification": session.logout_classification.value if session.logout_classification else None,
        "lunch_start_time": format_iso(session.lunch_start_time),
        "lunch_end_time": format_iso(session.lunch_end_time),
        "late_lunch_start": session.late_lunch_start,
        "late_lunch_end": session.late_lunch_end,
        "irregular": session.irregular,
        "irregular_reason": session.irregular_reason,
        "regularization": _regularization_to_dict(session.regularization),
    }


def session_from_dict(data: dict) -> AttendanceSession:
    classification = data.get("logout_classification")
    return AttendanceSession(
        driver_id=data["driver_id"],
        work_date=parse_iso_date(data["work_date"]),
        status=SessionStatus(data["status"]),
        assigned_vehicle_id=data.get("assigned_vehicle_id"),
        check_in_time=parse_iso_datetime(data.get("check_in_time")),
        check_out_time=parse_iso_datetime(data.get("check_out_time")),
        check_in_location=point_from_dict(data.get("check_in_location")),
        check_out_location=point_from_dict(data.get("check_out_location")),
        pre_check_completed=bool(data.get("pre_check_completed", False)),
        post_check_completed=bool(data.get("post_check_completed", False)),
        start_mileage=data.get("start_mileage"),
        end_mileage=data.get("end_mileage"),
        fuel_level=data.get("fuel_level"),
        total_hours=data.get("total_hours", 0.0),
        total_distance=data.get("total_distance", 0.0),
        late_login=bool(data.get("late_login", False)),
        logout_classification=LogoutClassification(classification) if classification else None,
        lunch_start_time=parse_iso_datetime(data.get("lunch_start_time")),
        lunch_end_time=parse_iso_datetime(data.get("lunch_end_time")),
        late_lunch_start=bool(data.get("late_lunch_start", False)),
        late_lunch_end=bool(data.get("late_lunch_end", False)),
        irregular=bool(data.get("irregular", False)),
        irregular_reason=data.get("irregular_reason"),
        regularization=_regularization_from_dict(data.get("regularization")),
    )

"""
Attendance session state machine.

NOT_LOGGED_IN -> CHECKED_IN -> CHECKED_OUT, one cycle per driver per day.
Sessions are frozen values; each operation returns the new session and the
events it produced. A CHECKED_OUT session rejects every further operation.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..checkout.detector import ForgottenCheckoutDetector
from ..common.validators import require_in_range, require_non_empty, require_non_negative
from ..core.constants import MAX_FUEL_LEVEL
from ..core.enums import LogoutClassification, LunchAction, SessionStatus
from ..core.exceptions import DataIntegrityError, GuardFailure, LocationUnavailableError, PreconditionError, ValidationError
from ..core.results import GuardCheck
from ..events.model import (
    DomainEvent,
    LunchBreakRecorded,
    RegularizationRequested,
    SessionClockedIn,
    SessionClockedOut,
)
from ..geo.model import GeoPoint
from ..timewindow.model import ShiftBoundaries
from ..timewindow.validator import validate_evening_logout, validate_lunch_timing, validate_morning_login
from .model import AttendanceSession, RegularizationRequest


@dataclass(frozen=True)
class SessionResult:
    session: AttendanceSession
    events: tuple[DomainEvent, ...]


class AttendanceSessionMachine:
    def __init__(
        self,
        *,
        boundaries: Optional[ShiftBoundaries] = None,
        detector: Optional[ForgottenCheckoutDetector] = None,
        enforce_morning_login: bool = True,
    ):
        self._boundaries = boundaries or ShiftBoundaries()
        self._detector = detector or ForgottenCheckoutDetector()
        self._enforce_morning_login = bool(enforce_morning_login)

    @staticmethod
    def _require_status(session: AttendanceSession, expected: SessionStatus, action: str) -> None:
        if session.status == expected:
            return
        if session.is_closed:
            raise PreconditionError(f"Cannot {action}: session for {session.work_date} is already checked out")
        if session.status == SessionStatus.NOT_LOGGED_IN:
            raise PreconditionError(f"Cannot {action}: not clocked in")
        raise PreconditionError(f"Cannot {action}: already clocked in")

    def clock_in(
        self,
        session: AttendanceSession,
        *,
        driver_id: int,
        vehicle_id: Optional[int],
        location: Optional[GeoPoint],
        pre_check_completed: bool,
        now: datetime,
        mileage: Optional[float] = None,
    ) -> SessionResult:
        self._require_status(session, SessionStatus.NOT_LOGGED_IN, "clock in")
        if driver_id != session.driver_id:
            raise PreconditionError(f"Session belongs to driver {session.driver_id}")
        if now.date() != session.work_date:
            raise PreconditionError(f"Session is for {session.work_date}, not {now.date()}")
        if not pre_check_completed:
            raise PreconditionError("Complete the vehicle pre-check before clocking in")
        vehicle_id = vehicle_id if vehicle_id is not None else session.assigned_vehicle_id
        if vehicle_id is None:
            raise PreconditionError("No vehicle assigned")
        if location is None:
            raise LocationUnavailableError("GPS location is required to clock in")
        require_non_negative(mileage, "Start mileage")

        verdict = validate_morning_login(now, self._boundaries)
        if self._enforce_morning_login and not verdict.can_proceed:
            raise GuardFailure(
                verdict.message,
                checks=[GuardCheck(name="morning_login", result=verdict, overridable=False)],
                target=SessionStatus.CHECKED_IN.value,
            )

        late = verdict.is_grace_period or not verdict.is_valid
        updated = replace(
            session,
            status=SessionStatus.CHECKED_IN,
            assigned_vehicle_id=vehicle_id,
            check_in_time=now,
            check_in_location=location,
            pre_check_completed=True,
            start_mileage=mileage,
            late_login=late,
        )
        event = SessionClockedIn(
            driver_id=session.driver_id,
            work_date=session.work_date,
            vehicle_id=vehicle_id,
            check_in_time=now,
            late_login=late,
        )
        return SessionResult(session=updated, events=(event,))

    def clock_out(
        self,
        session: AttendanceSession,
        *,
        location: Optional[GeoPoint],
        post_check_completed: bool,
        now: datetime,
        mileage: Optional[float] = None,
        fuel_level: Optional[float] = None,
        is_extended_shift: bool = False,
    ) -> SessionResult:
        self._require_status(session, SessionStatus.CHECKED_IN, "clock out")
        if not post_check_completed:
            raise PreconditionError("Complete the vehicle post-check before clocking out")
        if location is None:
            raise LocationUnavailableError("GPS location is required to clock out")
        require_non_negative(mileage, "End mileage")
        require_in_range(fuel_level, "Fuel level", 0, MAX_FUEL_LEVEL)

        total_hours = self._elapsed_hours(session, now)
        total_distance = 0.0
        if mileage is not None and session.start_mileage is not None:
            total_distance = float(mileage) - float(session.start_mileage)
            if total_distance < 0:
                raise DataIntegrityError(
                    f"End mileage {mileage} is below start mileage {session.start_mileage}"
                )

        verdict = validate_evening_logout(now, is_extended_shift, self._boundaries)
        updated = replace(
            session,
            status=SessionStatus.CHECKED_OUT,
            check_out_time=now,
            check_out_location=location,
            post_check_completed=True,
            end_mileage=mileage,
            fuel_level=fuel_level,
            total_hours=total_hours,
            total_distance=total_distance,
            logout_classification=LogoutClassification(verdict.classification),
        )
        event = SessionClockedOut(
            driver_id=session.driver_id,
            work_date=session.work_date,
            check_out_time=now,
            total_hours=total_hours,
            total_distance=total_distance,
        )
        return SessionResult(session=updated, events=(event,))

    @staticmethod
    def _elapsed_hours(session: AttendanceSession, check_out_time: datetime) -> float:
        if session.check_in_time is None:
            raise DataIntegrityError("Checked-in session has no check-in time")
        if check_out_time < session.check_in_time:
            raise DataIntegrityError("Check-out time is before check-in time")
        return (check_out_time - session.check_in_time).total_seconds() / 3600

    # ------------------------------------------------------------------
    # Lunch break
    # ------------------------------------------------------------------
    def start_lunch(self, session: AttendanceSession, *, now: datetime) -> SessionResult:
        self._require_status(session, SessionStatus.CHECKED_IN, "start lunch")
        if session.lunch_start_time is not None:
            raise PreconditionError("Lunch break already started")

        verdict = validate_lunch_timing(now, LunchAction.START, self._boundaries)
        if not verdict.can_proceed:
            raise GuardFailure(
                verdict.message,
                checks=[GuardCheck(name="lunch_start", result=verdict, overridable=False)],
            )
        updated = replace(session, lunch_start_time=now, late_lunch_start=verdict.is_grace_period)
        event = LunchBreakRecorded(
            driver_id=session.driver_id,
            work_date=session.work_date,
            action=LunchAction.START,
            timestamp=now,
            late=verdict.is_grace_period,
        )
        return SessionResult(session=updated, events=(event,))

    def end_lunch(self, session: AttendanceSession, *, now: datetime) -> SessionResult:
        self._require_status(session, SessionStatus.CHECKED_IN, "end lunch")
        if session.lunch_start_time is None:
            raise PreconditionError("Lunch break has not started")
        if session.lunch_end_time is not None:
            raise PreconditionError("Lunch break already ended")
        if now < session.lunch_start_time:
            raise DataIntegrityError("Lunch end is before lunch start")

        # Advisory only: an early or late return is recorded, never blocked.
        verdict = validate_lunch_timing(now, LunchAction.END, self._boundaries)
        updated = replace(session, lunch_end_time=now, late_lunch_end=verdict.is_grace_period)
        event = LunchBreakRecorded(
            driver_id=session.driver_id,
            work_date=session.work_date,
            action=LunchAction.END,
            timestamp=now,
            late=verdict.is_grace_period,
        )
        return SessionResult(session=updated, events=(event,))

    # ------------------------------------------------------------------
    # Forgotten checkout remedies
    # ------------------------------------------------------------------
    def _require_forgotten(self, session: AttendanceSession, now: datetime) -> None:
        self._require_status(session, SessionStatus.CHECKED_IN, "close a forgotten session")
        status = self._detector.check(session.check_in_time, now)
        if not status.requires_regularization:
            raise PreconditionError(f"Session does not need regularization ({status.message})")

    def force_checkout(
        self,
        session: AttendanceSession,
        *,
        now: datetime,
        location: Optional[GeoPoint] = None,
    ) -> SessionResult:
        self._require_forgotten(session, now)
        total_hours = self._elapsed_hours(session, now)
        updated = replace(
            session,
            status=SessionStatus.CHECKED_OUT,
            check_out_time=now,
            check_out_location=location,
            total_hours=total_hours,
            irregular=True,
            irregular_reason="forced checkout",
        )
        event = SessionClockedOut(
            driver_id=session.driver_id,
            work_date=session.work_date,
            check_out_time=now,
            total_hours=total_hours,
            total_distance=0.0,
            irregular=True,
        )
        return SessionResult(session=updated, events=(event,))

    def request_regularization(
        self,
        session: AttendanceSession,
        *,
        requested_checkout_time: datetime,
        reason: str,
        now: datetime,
    ) -> SessionResult:
        self._require_forgotten(session, now)
        reason = require_non_empty(reason, "Regularization reason")
        if requested_checkout_time > now:
            raise ValidationError("Requested checkout time cannot be in the future")
        if requested_checkout_time < session.check_in_time:
            raise ValidationError("Requested checkout time cannot be before check-in")
        total_hours = self._elapsed_hours(session, requested_checkout_time)

        request = RegularizationRequest(
            requested_checkout_time=requested_checkout_time,
            reason=reason,
            requested_at=now,
        )
        updated = replace(
            session,
            status=SessionStatus.CHECKED_OUT,
            check_out_time=requested_checkout_time,
            total_hours=total_hours,
            irregular=True,
            irregular_reason="regularization requested",
            regularization=request,
        )
        events = (
            RegularizationRequested(
                driver_id=session.driver_id,
                work_date=session.work_date,
                requested_checkout_time=requested_checkout_time,
                reason=reason,
            ),
            SessionClockedOut(
                driver_id=session.driver_id,
                work_date=session.work_date,
                check_out_time=requested_checkout_time,
                total_hours=total_hours,
                total_distance=0.0,
                irregular=True,
            ),
        )
        return SessionResult(session=updated, events=events)

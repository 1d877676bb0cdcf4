from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

import structlog

from ..checkout.detector import ForgottenCheckoutDetector
from ..checkout.model import CheckoutStatus
from ..common.datetime_utils import now_local
from ..core.exceptions import DomainError, PreconditionError
from ..events.publisher import EventPublisher
from ..geo.model import GeoPoint
from .machine import AttendanceSessionMachine, SessionResult
from .model import AttendanceSession
from .repository import SessionRepository

logger = structlog.get_logger(__name__)


class AttendanceService:
    """Loads a driver's session, runs the machine, saves and publishes.

    Callers serialize operations per driver and day; this service adds no
    locking of its own.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        machine: AttendanceSessionMachine,
        *,
        detector: Optional[ForgottenCheckoutDetector] = None,
        publisher: Optional[EventPublisher] = None,
    ):
        self._sessions = sessions
        self._machine = machine
        self._detector = detector or ForgottenCheckoutDetector()
        self._publisher = publisher

    def _commit(self, result: SessionResult, action: str) -> SessionResult:
        self._sessions.save(result.session)
        if self._publisher is not None and result.events:
            self._publisher.publish(result.events)
        logger.info(
            f"session_{action}",
            driver_id=result.session.driver_id,
            work_date=result.session.work_date.isoformat(),
            status=result.session.status.value,
            irregular=result.session.irregular,
        )
        return result

    def _run(self, action: str, driver_id: int, op: Callable[[], SessionResult]) -> SessionResult:
        try:
            result = op()
        except DomainError as e:
            logger.info("session_action_rejected", action=action, driver_id=driver_id, kind=e.kind, error=e.message)
            raise
        return self._commit(result, action)

    def _current_session(self, driver_id: int, today: date) -> AttendanceSession:
        session = self._sessions.get_open_for_driver(driver_id) or self._sessions.get_for_driver_and_date(driver_id, today)
        if session is None:
            raise PreconditionError("You have not clocked in today")
        return session

    def clock_in(
        self,
        driver_id: int,
        *,
        vehicle_id: Optional[int],
        location: Optional[GeoPoint],
        pre_check_completed: bool,
        mileage: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> SessionResult:
        now = now or now_local()
        today = now.date()

        def op() -> SessionResult:
            stale = self._sessions.get_open_for_driver(driver_id)
            if stale is not None and stale.work_date != today:
                raise PreconditionError(
                    f"Session from {stale.work_date} is still open; request regularization or force checkout first"
                )
            session = self._sessions.get_for_driver_and_date(driver_id, today) or AttendanceSession.open(
                driver_id=driver_id, work_date=today, assigned_vehicle_id=vehicle_id
            )
            return self._machine.clock_in(
                session,
                driver_id=driver_id,
                vehicle_id=vehicle_id,
                location=location,
                pre_check_completed=pre_check_completed,
                now=now,
                mileage=mileage,
            )

        return self._run("clocked_in", driver_id, op)

    def clock_out(
        self,
        driver_id: int,
        *,
        location: Optional[GeoPoint],
        post_check_completed: bool,
        mileage: Optional[float] = None,
        fuel_level: Optional[float] = None,
        is_extended_shift: bool = False,
        now: Optional[datetime] = None,
    ) -> SessionResult:
        now = now or now_local()

        def op() -> SessionResult:
            session = self._current_session(driver_id, now.date())
            return self._machine.clock_out(
                session,
                location=location,
                post_check_completed=post_check_completed,
                now=now,
                mileage=mileage,
                fuel_level=fuel_level,
                is_extended_shift=is_extended_shift,
            )

        return self._run("clocked_out", driver_id, op)

    def start_lunch(self, driver_id: int, *, now: Optional[datetime] = None) -> SessionResult:
        now = now or now_local()
        return self._run(
            "lunch_started",
            driver_id,
            lambda: self._machine.start_lunch(self._current_session(driver_id, now.date()), now=now),
        )

    def end_lunch(self, driver_id: int, *, now: Optional[datetime] = None) -> SessionResult:
        now = now or now_local()
        return self._run(
            "lunch_ended",
            driver_id,
            lambda: self._machine.end_lunch(self._current_session(driver_id, now.date()), now=now),
        )

    def forgotten_checkout_status(self, driver_id: int, *, now: Optional[datetime] = None) -> Optional[CheckoutStatus]:
        """Alert state for the driver's open session, None when nothing is open."""
        now = now or now_local()
        session = self._sessions.get_open_for_driver(driver_id)
        if session is None or session.check_in_time is None:
            return None
        status = self._detector.check(session.check_in_time, now)
        if status.requires_regularization:
            logger.warning(
                "long_open_session",
                driver_id=driver_id,
                work_date=session.work_date.isoformat(),
                hours_checked_in=round(status.hours_checked_in, 2),
                is_forgotten=status.is_forgotten,
            )
        return status

    def force_checkout(
        self,
        driver_id: int,
        *,
        location: Optional[GeoPoint] = None,
        now: Optional[datetime] = None,
    ) -> SessionResult:
        now = now or now_local()
        return self._run(
            "force_checked_out",
            driver_id,
            lambda: self._machine.force_checkout(self._current_session(driver_id, now.date()), now=now, location=location),
        )

    def request_regularization(
        self,
        driver_id: int,
        *,
        requested_checkout_time: datetime,
        reason: str,
        now: Optional[datetime] = None,
    ) -> SessionResult:
        now = now or now_local()
        return self._run(
            "regularization_requested",
            driver_id,
            lambda: self._machine.request_regularization(
                self._current_session(driver_id, now.date()),
                requested_checkout_time=requested_checkout_time,
                reason=reason,
                now=now,
            ),
        )

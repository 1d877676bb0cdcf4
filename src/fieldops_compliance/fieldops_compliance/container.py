from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.machine import AttendanceSessionMachine
from .attendance.repository import SessionRepository
from .attendance.service import AttendanceService
from .checkout.detector import ForgottenCheckoutDetector
from .escalation.factory import EscalationStrategyFactory
from .escalation.policy import EscalationPolicy
from .events.publisher import EventPublisher
from .grace.calculator.standard_calculator import StandardGracePeriodCalculator
from .grace.model import GracePeriodPolicy
from .settings import EngineSettings
from .timewindow.model import ShiftBoundaries
from .trips.machine import TripStatusMachine
from .trips.repository import TaskRepository
from .trips.service import TripService


@dataclass(frozen=True)
class Container:
    settings: EngineSettings

    boundaries: ShiftBoundaries
    detector: ForgottenCheckoutDetector
    grace_calculator: StandardGracePeriodCalculator
    escalation_policy: EscalationPolicy

    attendance_machine: AttendanceSessionMachine
    trip_machine: TripStatusMachine

    attendance_service: AttendanceService
    trip_service: TripService


def build_container(
    *,
    settings: EngineSettings,
    sessions: SessionRepository,
    tasks: TaskRepository,
    publisher: Optional[EventPublisher] = None,
) -> Container:
    boundaries = ShiftBoundaries(
        morning_login_cutoff=settings.morning_login_cutoff,
        morning_grace_minutes=settings.morning_grace_minutes,
        lunch_start=settings.lunch_start,
        lunch_end=settings.lunch_end,
        lunch_grace_minutes=settings.lunch_grace_minutes,
        evening_logout_normal=settings.evening_logout_normal,
        evening_logout_extended=settings.evening_logout_extended,
        evening_grace_minutes=settings.evening_grace_minutes,
        work_start_hour=settings.work_start_hour,
    )
    detector = ForgottenCheckoutDetector(
        regularization_hours=settings.regularization_hours,
        forgotten_hours=settings.forgotten_hours,
    )
    grace_calculator = StandardGracePeriodCalculator(
        GracePeriodPolicy(
            cap_minutes=settings.grace_cap_minutes,
            auto_approval_threshold_minutes=settings.grace_auto_approval_minutes,
            low_risk_reasons=settings.grace_low_risk_reasons,
        )
    )
    escalation_policy = EscalationPolicy(
        strategy_factory=EscalationStrategyFactory(),
        replacement_suggestion_minutes=settings.replacement_suggestion_minutes,
    )

    attendance_machine = AttendanceSessionMachine(
        boundaries=boundaries,
        detector=detector,
        enforce_morning_login=settings.enforce_morning_login,
    )
    trip_machine = TripStatusMachine(grace_calculator=grace_calculator, escalation=escalation_policy)

    attendance_service = AttendanceService(sessions, attendance_machine, detector=detector, publisher=publisher)
    trip_service = TripService(tasks, trip_machine, publisher=publisher)

    return Container(
        settings=settings,
        boundaries=boundaries,
        detector=detector,
        grace_calculator=grace_calculator,
        escalation_policy=escalation_policy,
        attendance_machine=attendance_machine,
        trip_machine=trip_machine,
        attendance_service=attendance_service,
        trip_service=trip_service,
    )

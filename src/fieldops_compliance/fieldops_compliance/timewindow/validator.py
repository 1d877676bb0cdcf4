"""
Time-window rules.

Everything here is pure: the caller passes ``now`` and the boundaries.
Comparisons use whole minutes since midnight and inclusive boundaries.
Only the morning login and the lunch start verdicts can block
(``can_proceed=False``); callers treat the rest as advisory.
"""
from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import format_hhmm, minutes_since_midnight
from ..core.enums import LogoutClassification, LunchAction
from ..core.results import ValidationResult
from .model import ShiftBoundaries


def validate_morning_login(now: datetime, config: ShiftBoundaries) -> ValidationResult:
    current = minutes_since_midnight(now)
    cutoff = config.morning_cutoff_minutes
    grace_end = cutoff + config.morning_grace_minutes

    if current <= cutoff:
        return ValidationResult(is_valid=True, can_proceed=True, message="On time for morning login")
    if current <= grace_end:
        return ValidationResult(
            is_valid=True,
            can_proceed=True,
            is_grace_period=True,
            message=f"Late login ({current - cutoff} minutes past {format_hhmm(cutoff)})",
        )
    return ValidationResult(
        is_valid=False,
        can_proceed=False,
        message=f"Morning login window closed. Login allowed until {format_hhmm(grace_end)}",
    )


def validate_lunch_timing(now: datetime, action: LunchAction, config: ShiftBoundaries) -> ValidationResult:
    action = LunchAction(action)
    current = minutes_since_midnight(now)
    if action == LunchAction.START:
        boundary, label = config.lunch_start_minutes, "starts"
    else:
        boundary, label = config.lunch_end_minutes, "ends"
    grace_end = boundary + config.lunch_grace_minutes

    if current < boundary:
        return ValidationResult(
            is_valid=False,
            can_proceed=False,
            message=f"Lunch break {label} at {format_hhmm(boundary)}",
        )
    if current <= grace_end:
        return ValidationResult(
            is_valid=True,
            can_proceed=True,
            message=f"Lunch break {'started' if action == LunchAction.START else 'ended'} on time",
        )
    return ValidationResult(
        is_valid=True,
        can_proceed=True,
        is_grace_period=True,
        message=f"Late lunch {action.value} ({current - boundary} minutes past {format_hhmm(boundary)})",
    )


def validate_evening_logout(now: datetime, is_extended_shift: bool, config: ShiftBoundaries) -> ValidationResult:
    current = minutes_since_midnight(now)
    logout = config.logout_minutes(is_extended_shift)
    grace_end = logout + config.evening_grace_minutes

    if current < logout:
        return ValidationResult(
            is_valid=True,
            can_proceed=True,
            classification=LogoutClassification.EARLY.value,
            message=f"Early logout (before {format_hhmm(logout)})",
        )
    if current <= grace_end:
        return ValidationResult(
            is_valid=True,
            can_proceed=True,
            classification=LogoutClassification.ON_TIME.value,
            message="On time for evening logout",
        )
    return ValidationResult(
        is_valid=True,
        can_proceed=True,
        is_grace_period=True,
        classification=LogoutClassification.LATE.value,
        message=f"Late logout ({current - logout} minutes past {format_hhmm(logout)})",
    )


def validate_pickup_window(now: datetime, estimated_pickup_time: datetime, window_minutes: int) -> ValidationResult:
    """Elapsed-window check: estimated - window <= now <= estimated + window."""
    offset = (now - estimated_pickup_time).total_seconds() / 60
    if abs(offset) <= window_minutes:
        return ValidationResult(is_valid=True, can_proceed=True, message="Within pickup time window")

    direction = "early" if offset < 0 else "late"
    return ValidationResult(
        is_valid=False,
        can_proceed=False,
        message=(
            f"Pickup {int(abs(offset))} minutes {direction}; window is "
            f"±{window_minutes} minutes around {estimated_pickup_time.strftime('%H:%M')}"
        ),
    )


def describe_period(now: datetime, config: ShiftBoundaries) -> str:
    hour = now.hour
    if hour < config.work_start_hour:
        period = "Before Work Hours"
    elif hour < config.lunch_start.hour:
        period = "Morning Work Period"
    elif hour < config.lunch_end.hour:
        period = "Lunch Period"
    elif hour < config.evening_logout_normal.hour:
        period = "Afternoon Work Period"
    elif hour < config.evening_logout_extended.hour:
        period = "Extended Work Period"
    else:
        period = "After Work Hours"
    return f"{now.strftime('%H:%M')} - {period}"


def is_within_working_hours(now: datetime, config: ShiftBoundaries) -> bool:
    return config.work_start_hour <= now.hour <= config.evening_logout_extended.hour

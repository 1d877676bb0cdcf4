"""
Engine settings.

``load_settings`` reads a settings module (see ``config/``) and turns its
upper-case attributes into a validated, immutable ``EngineSettings``.
Missing attributes fall back to the defaults in ``core.constants``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from types import ModuleType
from typing import FrozenSet, Iterable, Union

from .common.datetime_utils import parse_hhmm
from .core import constants as c
from .core.exceptions import ValidationError


@dataclass(frozen=True)
class EngineSettings:
    morning_login_cutoff: time = parse_hhmm(c.DEFAULT_MORNING_LOGIN_CUTOFF)
    morning_grace_minutes: int = c.DEFAULT_MORNING_GRACE_MINUTES
    lunch_start: time = parse_hhmm(c.DEFAULT_LUNCH_START)
    lunch_end: time = parse_hhmm(c.DEFAULT_LUNCH_END)
    lunch_grace_minutes: int = c.DEFAULT_LUNCH_GRACE_MINUTES
    evening_logout_normal: time = parse_hhmm(c.DEFAULT_EVENING_LOGOUT_NORMAL)
    evening_logout_extended: time = parse_hhmm(c.DEFAULT_EVENING_LOGOUT_EXTENDED)
    evening_grace_minutes: int = c.DEFAULT_EVENING_GRACE_MINUTES
    work_start_hour: int = c.DEFAULT_WORK_START_HOUR
    enforce_morning_login: bool = True

    grace_cap_minutes: int = c.DEFAULT_GRACE_CAP_MINUTES
    grace_auto_approval_minutes: int = c.DEFAULT_GRACE_AUTO_APPROVAL_MINUTES
    grace_low_risk_reasons: FrozenSet[str] = field(
        default_factory=lambda: frozenset(c.DEFAULT_LOW_RISK_DELAY_REASONS)
    )
    replacement_suggestion_minutes: int = c.DEFAULT_REPLACEMENT_SUGGESTION_MINUTES

    regularization_hours: float = c.DEFAULT_REGULARIZATION_HOURS
    forgotten_hours: float = c.DEFAULT_FORGOTTEN_HOURS

    log_level: str = "INFO"
    log_json: bool = True


def _as_time(value: Union[str, time]) -> time:
    return value if isinstance(value, time) else parse_hhmm(str(value))


def _as_int(value, name: str, *, low: int = 0) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if result < low:
        raise ValidationError(f"{name} must be >= {low}")
    return result


def _as_hours(value, name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if result <= 0:
        raise ValidationError(f"{name} must be greater than 0")
    return result


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _as_reasons(value: Union[str, Iterable[str]]) -> FrozenSet[str]:
    items = value.split(",") if isinstance(value, str) else value
    return frozenset(r.strip().lower() for r in items if r and r.strip())


def load_settings(module: ModuleType) -> EngineSettings:
    defaults = EngineSettings()

    def get(key: str, fallback):
        return getattr(module, key, fallback)

    settings = EngineSettings(
        morning_login_cutoff=_as_time(get("MORNING_LOGIN_CUTOFF", defaults.morning_login_cutoff)),
        morning_grace_minutes=_as_int(get("MORNING_GRACE_MINUTES", defaults.morning_grace_minutes), "MORNING_GRACE_MINUTES"),
        lunch_start=_as_time(get("LUNCH_START", defaults.lunch_start)),
        lunch_end=_as_time(get("LUNCH_END", defaults.lunch_end)),
        lunch_grace_minutes=_as_int(get("LUNCH_GRACE_MINUTES", defaults.lunch_grace_minutes), "LUNCH_GRACE_MINUTES"),
        evening_logout_normal=_as_time(get("EVENING_LOGOUT_NORMAL", defaults.evening_logout_normal)),
        evening_logout_extended=_as_time(get("EVENING_LOGOUT_EXTENDED", defaults.evening_logout_extended)),
        evening_grace_minutes=_as_int(get("EVENING_GRACE_MINUTES", defaults.evening_grace_minutes), "EVENING_GRACE_MINUTES"),
        work_start_hour=_as_int(get("WORK_START_HOUR", defaults.work_start_hour), "WORK_START_HOUR"),
        enforce_morning_login=_as_bool(get("ENFORCE_MORNING_LOGIN", defaults.enforce_morning_login)),
        grace_cap_minutes=_as_int(get("GRACE_CAP_MINUTES", defaults.grace_cap_minutes), "GRACE_CAP_MINUTES", low=1),
        grace_auto_approval_minutes=_as_int(
            get("GRACE_AUTO_APPROVAL_MINUTES", defaults.grace_auto_approval_minutes), "GRACE_AUTO_APPROVAL_MINUTES"
        ),
        grace_low_risk_reasons=_as_reasons(get("GRACE_LOW_RISK_REASONS", defaults.grace_low_risk_reasons)),
        replacement_suggestion_minutes=_as_int(
            get("REPLACEMENT_SUGGESTION_MINUTES", defaults.replacement_suggestion_minutes),
            "REPLACEMENT_SUGGESTION_MINUTES",
            low=1,
        ),
        regularization_hours=_as_hours(get("REGULARIZATION_HOURS", defaults.regularization_hours), "REGULARIZATION_HOURS"),
        forgotten_hours=_as_hours(get("FORGOTTEN_HOURS", defaults.forgotten_hours), "FORGOTTEN_HOURS"),
        log_level=str(get("LOG_LEVEL", defaults.log_level)).upper(),
        log_json=_as_bool(get("LOG_JSON", defaults.log_json)),
    )

    if not 0 <= settings.work_start_hour <= 23:
        raise ValidationError("WORK_START_HOUR must be between 0 and 23")
    if settings.lunch_end <= settings.lunch_start:
        raise ValidationError("LUNCH_END must be after LUNCH_START")
    if settings.evening_logout_extended < settings.evening_logout_normal:
        raise ValidationError("EVENING_LOGOUT_EXTENDED cannot be before EVENING_LOGOUT_NORMAL")
    if settings.forgotten_hours < settings.regularization_hours:
        raise ValidationError("FORGOTTEN_HOURS cannot be below REGULARIZATION_HOURS")
    return settings

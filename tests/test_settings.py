from datetime import time
from types import SimpleNamespace

import pytest

import config
import config.testing
from src.fieldops_compliance.fieldops_compliance.container import build_container
from src.fieldops_compliance.fieldops_compliance.core.exceptions import ValidationError
from src.fieldops_compliance.fieldops_compliance.settings import EngineSettings, load_settings


class NullSessions:
    def get_for_driver_and_date(self, driver_id, work_date):
        return None

    def get_open_for_driver(self, driver_id):
        return None

    def save(self, session):
        pass


class NullTasks:
    def get_by_id(self, task_id):
        return None

    def save(self, task):
        pass


@pytest.mark.parametrize(
    "env,module",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("development", "config.development"),
        ("staging", "config.development"),
    ],
)
def test_get_settings_module(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)
    assert config.get_settings_module() == module


def test_testing_module_matches_defaults():
    settings = load_settings(config.testing)
    assert settings == EngineSettings(log_level="WARNING")


def test_missing_keys_fall_back_to_defaults():
    settings = load_settings(SimpleNamespace(GRACE_CAP_MINUTES="45"))
    assert settings.grace_cap_minutes == 45
    assert settings.morning_login_cutoff == time(8, 0)
    assert settings.grace_low_risk_reasons == frozenset({"traffic", "weather", "fuel"})


def test_values_are_parsed():
    settings = load_settings(
        SimpleNamespace(
            MORNING_LOGIN_CUTOFF="07:30",
            GRACE_LOW_RISK_REASONS=" Traffic, rain ,,",
            ENFORCE_MORNING_LOGIN="0",
            REGULARIZATION_HOURS="9.5",
            LOG_LEVEL="debug",
        )
    )
    assert settings.morning_login_cutoff == time(7, 30)
    assert settings.grace_low_risk_reasons == frozenset({"traffic", "rain"})
    assert settings.enforce_morning_login is False
    assert settings.regularization_hours == 9.5
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "values",
    [
        {"MORNING_LOGIN_CUTOFF": "8am"},
        {"GRACE_CAP_MINUTES": "sixty"},
        {"GRACE_CAP_MINUTES": 0},
        {"MORNING_GRACE_MINUTES": -1},
        {"LUNCH_START": "13:00", "LUNCH_END": "12:00"},
        {"EVENING_LOGOUT_NORMAL": "19:00", "EVENING_LOGOUT_EXTENDED": "17:00"},
        {"REGULARIZATION_HOURS": 12, "FORGOTTEN_HOURS": 10},
        {"FORGOTTEN_HOURS": 0},
        {"WORK_START_HOUR": 24},
    ],
)
def test_bad_values_are_rejected(values):
    with pytest.raises(ValidationError):
        load_settings(SimpleNamespace(**values))


def test_build_container_wires_settings_through():
    settings = load_settings(SimpleNamespace(MORNING_GRACE_MINUTES=5, GRACE_CAP_MINUTES=30, ENFORCE_MORNING_LOGIN=False))
    container = build_container(settings=settings, sessions=NullSessions(), tasks=NullTasks())

    assert container.boundaries.morning_grace_minutes == 5
    assert container.grace_calculator.policy.cap_minutes == 30
    assert container.attendance_service is not None
    with pytest.raises(ValidationError):
        container.trip_service.get_task(1)

from __future__ import annotations

import importlib
from typing import Optional

import structlog
from dotenv import load_dotenv

from config import get_settings_module

from .attendance.repository import SessionRepository
from .container import Container, build_container
from .events.publisher import EventPublisher
from .logging import setup_logging
from .settings import load_settings
from .trips.repository import TaskRepository


def create_engine(
    *,
    sessions: SessionRepository,
    tasks: TaskRepository,
    publisher: Optional[EventPublisher] = None,
) -> Container:
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = load_settings(importlib.import_module(settings_module))
    setup_logging(settings.log_level, json=settings.log_json)

    structlog.get_logger(__name__).info(
        "engine_configured",
        settings_module=settings_module,
        enforce_morning_login=settings.enforce_morning_login,
        grace_cap_minutes=settings.grace_cap_minutes,
    )
    return build_container(settings=settings, sessions=sessions, tasks=tasks, publisher=publisher)

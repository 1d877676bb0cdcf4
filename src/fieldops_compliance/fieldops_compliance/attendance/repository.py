from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import AttendanceSession


class SessionRepository(Protocol):
    def get_for_driver_and_date(self, driver_id: int, work_date: date) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_open_for_driver(self, driver_id: int) -> Optional[AttendanceSession]:
        """The driver's CHECKED_IN session, whatever its date."""

        raise NotImplementedError

    def save(self, session: AttendanceSession) -> None:
        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..common.datetime_utils import minutes_since_midnight


@dataclass(frozen=True)
class ShiftBoundaries:
    """Fixed daily boundaries the time-window rules are evaluated against."""

    morning_login_cutoff: time = time(8, 0)
    morning_grace_minutes: int = 15
    lunch_start: time = time(12, 0)
    lunch_end: time = time(13, 0)
    lunch_grace_minutes: int = 15
    evening_logout_normal: time = time(17, 0)
    evening_logout_extended: time = time(19, 0)
    evening_grace_minutes: int = 30
    work_start_hour: int = 6

    @property
    def morning_cutoff_minutes(self) -> int:
        return minutes_since_midnight(self.morning_login_cutoff)

    @property
    def lunch_start_minutes(self) -> int:
        return minutes_since_midnight(self.lunch_start)

    @property
    def lunch_end_minutes(self) -> int:
        return minutes_since_midnight(self.lunch_end)

    def logout_minutes(self, is_extended_shift: bool) -> int:
        boundary = self.evening_logout_extended if is_extended_shift else self.evening_logout_normal
        return minutes_since_midnight(boundary)


@dataclass(frozen=True)
class TimeWindow:
    """Tolerance around an estimated pickup time, in minutes either side."""

    window_minutes: int

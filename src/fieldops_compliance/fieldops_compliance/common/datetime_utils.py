from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def format_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def parse_hhmm(value: str) -> time:
    v = (value or "").strip()
    try:
        return datetime.strptime(v, "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time '{value}' (expected HH:MM)")


def format_hhmm(minutes: int) -> str:
    """Minutes since midnight -> 'HH:MM'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_since_midnight(value) -> int:
    """Whole minutes since midnight; seconds are dropped."""
    return value.hour * 60 + value.minute


def now_local() -> datetime:
    """Current local time.

    Note: only the service layer falls back to this; machines and validators
    always receive ``now`` from the caller.
    """
    return datetime.now()

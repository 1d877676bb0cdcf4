from __future__ import annotations

import math
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive(value: float, field_name: str) -> float:
    if value is None or not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{field_name} must be a finite number greater than 0")
    return value


def require_non_negative(value: Optional[float], field_name: str) -> Optional[float]:
    if value is not None and value < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return value


def require_in_range(value: Optional[float], field_name: str, low: float, high: float) -> Optional[float]:
    if value is not None and not (low <= value <= high):
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return value


def require_choice(value, enum_cls, field_name: str):
    """Coerce a raw value into ``enum_cls`` or raise ValidationError."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")

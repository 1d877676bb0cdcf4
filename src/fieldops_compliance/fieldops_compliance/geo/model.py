from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GeoPoint:
    """A position fix supplied by the host's location source."""

    latitude: float
    longitude: float
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class GeofenceZone:
    """Circular site boundary: center + radius, plus optional tolerances."""

    center: GeoPoint
    radius_meters: float
    allowed_variance_meters: float = 0.0
    max_accuracy_meters: Optional[float] = None

    @property
    def limit_meters(self) -> float:
        return self.radius_meters + (self.allowed_variance_meters or 0.0)

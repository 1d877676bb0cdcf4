"""Geofence checks on great-circle distance."""
from __future__ import annotations

import math

from ..core.constants import EARTH_RADIUS_M
from ..core.results import ValidationResult
from .model import GeofenceZone, GeoPoint


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Metres between two lat/lon pairs along the Earth's surface."""
    lat_a, lat_b = math.radians(lat1), math.radians(lat2)
    half_dlat = math.radians(lat2 - lat1) / 2
    half_dlon = math.radians(lon2 - lon1) / 2
    h = math.sin(half_dlat) ** 2 + math.cos(lat_a) * math.cos(lat_b) * math.sin(half_dlon) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def validate_geofence(point: GeoPoint, zone: GeofenceZone, zone_name: str) -> ValidationResult:
    """
    Check whether a point lies inside a zone.

    Args:
        point: Current position
        zone: Geofence with radius and optional allowed variance
        zone_name: Label used in the message

    Returns:
        ValidationResult with ``distance`` in meters. ``can_proceed`` is
        always True: a failed geofence never blocks by itself, callers
        decide whether to offer an override. ``accuracy_risk`` flags a fix
        whose accuracy is worse than the zone tolerates.
    """
    distance = distance_between(point, zone.center)
    is_valid = distance <= zone.limit_meters
    accuracy_risk = (
        zone.max_accuracy_meters is not None
        and point.accuracy is not None
        and point.accuracy > zone.max_accuracy_meters
    )

    if is_valid:
        message = f"Within {zone_name} geofence ({distance:.0f}m from center)"
    else:
        message = (
            f"Outside {zone_name} geofence: {distance:.0f}m from center, "
            f"allowed {zone.limit_meters:.0f}m"
        )
    if accuracy_risk:
        message += f" (GPS accuracy {point.accuracy:.0f}m is low)"

    return ValidationResult(
        is_valid=is_valid,
        can_proceed=True,
        message=message,
        distance=distance,
        accuracy_risk=accuracy_risk,
    )

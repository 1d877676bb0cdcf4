from __future__ import annotations

from typing import Optional

from .model import GeofenceZone, GeoPoint


def point_to_dict(point: Optional[GeoPoint]) -> Optional[dict]:
    if point is None:
        return None
    return {"latitude": point.latitude, "longitude": point.longitude, "accuracy": point.accuracy}


def point_from_dict(data: Optional[dict]) -> Optional[GeoPoint]:
    if data is None:
        return None
    return GeoPoint(
        latitude=float(data["latitude"]),
        longitude=float(data["longitude"]),
        accuracy=data.get("accuracy"),
    )


def zone_to_dict(zone: Optional[GeofenceZone]) -> Optional[dict]:
    if zone is None:
        return None
    return {
        "center": point_to_dict(zone.center),
        "radius_meters": zone.radius_meters,
        "allowed_variance_meters": zone.allowed_variance_meters,
        "max_accuracy_meters": zone.max_accuracy_meters,
    }


def zone_from_dict(data: Optional[dict]) -> Optional[GeofenceZone]:
    if data is None:
        return None
    return GeofenceZone(
        center=point_from_dict(data["center"]),
        radius_meters=data["radius_meters"],
        allowed_variance_meters=data.get("allowed_variance_meters", 0.0),
        max_accuracy_meters=data.get("max_accuracy_meters"),
    )

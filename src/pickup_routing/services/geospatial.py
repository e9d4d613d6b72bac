"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import MultiPoint

from ..models.domain import Point
from .routing.models import Bounds

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: Point, b: Point) -> float:
    """Great-circle distance between two points in kilometres."""

    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def is_valid_coordinate(lat: float, lng: float, *, reject_null_island: bool = False) -> bool:
    """Return True if (lat, lng) is a finite pair inside the valid degree ranges.

    ``reject_null_island`` additionally refuses ``(0, 0)``, which geocoders and
    GPS devices emit when they have no fix.
    """

    try:
        point = Point.validated(lat, lng)
    except (TypeError, ValueError):
        return False
    if reject_null_island and point.lat == 0.0 and point.lng == 0.0:
        return False
    return True


def compute_bounds(points: Sequence[Point]) -> Bounds:
    """Bounding box (southwest/northeast corners) over the given points."""

    if not points:
        raise ValueError("At least one point is required to compute bounds.")
    # shapely works in (x, y) = (lng, lat)
    min_lng, min_lat, max_lng, max_lat = MultiPoint([(p.lng, p.lat) for p in points]).bounds
    return Bounds(
        southwest=Point(min_lat, min_lng),
        northeast=Point(max_lat, max_lng),
    )

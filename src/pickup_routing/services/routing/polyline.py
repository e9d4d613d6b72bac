"""Encoded polyline codec (Google's compact polyline format)."""

from __future__ import annotations

import math
from typing import Sequence

from ...models.domain import Point
from ..geospatial import compute_bounds
from .models import POLYLINE_SOURCE_STRAIGHT_LINE, PathResult

PRECISION = 1e5


def _scale(value: float) -> int:
    """Scale a coordinate to integer 1e-5 units, rounding halves away from zero."""
    scaled = math.floor(abs(value) * PRECISION + 0.5)
    return int(-scaled if value < 0 else scaled)


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else (value << 1)
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(points: Sequence[Point]) -> str:
    """Encode points as a polyline string. An empty sequence encodes to ``""``."""
    encoded = []
    prev_lat = 0
    prev_lng = 0

    for point in points:
        lat = _scale(point.lat)
        lng = _scale(point.lng)
        encoded.append(_encode_value(lat - prev_lat))
        encoded.append(_encode_value(lng - prev_lng))
        prev_lat = lat
        prev_lng = lng

    return "".join(encoded)


def decode_polyline(polyline: str) -> list[Point]:
    """Decode a polyline string to a list of points.

    Args:
        polyline: Encoded polyline string

    Returns:
        List of points, precise to 1e-5 degrees
    """
    coordinates = []
    index = 0
    lat = 0
    lng = 0

    while index < len(polyline):
        # Decode latitude
        shift = 0
        result = 0
        while True:
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1F) << shift
            shift += 5
            if b < 0x20:
                break
        lat += ~(result >> 1) if (result & 1) else (result >> 1)

        # Decode longitude
        shift = 0
        result = 0
        while True:
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1F) << shift
            shift += 5
            if b < 0x20:
                break
        lng += ~(result >> 1) if (result & 1) else (result >> 1)

        coordinates.append(Point(lat / PRECISION, lng / PRECISION))

    return coordinates


def straight_line_path(points: Sequence[Point]) -> PathResult:
    """Polyline joining ``points`` directly, with the bounds of the same points."""
    return PathResult(
        polyline=encode_polyline(points),
        bounds=compute_bounds(points) if points else None,
        source=POLYLINE_SOURCE_STRAIGHT_LINE,
    )

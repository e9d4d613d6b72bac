"""Domain models for school and pickup records."""

import math
from dataclasses import dataclass

from ..errors import InvalidCoordinateError

DEFAULT_CHILD_NAME = "Sin nombre"


@dataclass(frozen=True, slots=True)
class Point:
    """A latitude/longitude pair in degrees."""

    lat: float
    lng: float

    @classmethod
    def validated(cls, lat: float, lng: float) -> "Point":
        lat, lng = float(lat), float(lng)
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise InvalidCoordinateError(f"Coordinates must be finite, got ({lat}, {lng}).")
        if not -90.0 <= lat <= 90.0:
            raise InvalidCoordinateError(f"Latitude {lat} is outside [-90, 90].")
        if not -180.0 <= lng <= 180.0:
            raise InvalidCoordinateError(f"Longitude {lng} is outside [-180, 180].")
        return cls(lat, lng)

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)

    def as_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True, slots=True)
class PickupRequest:
    """A confirmed pickup supplied by the trip workflow."""

    confirmation_id: str
    child_id: str
    address: str
    location: Point
    child_name: str = DEFAULT_CHILD_NAME
    reference: str = ""

"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...models.domain import Point, PickupRequest

POLYLINE_SOURCE_DIRECTIONS = "directions"
POLYLINE_SOURCE_STRAIGHT_LINE = "straight_line"


@dataclass(frozen=True, slots=True)
class ClusterAssignment:
    pickup: PickupRequest
    cluster_index: int


@dataclass(frozen=True, slots=True)
class Bounds:
    southwest: Point
    northeast: Point

    def as_dict(self) -> dict[str, dict[str, float]]:
        return {"southwest": self.southwest.as_dict(), "northeast": self.northeast.as_dict()}


@dataclass(frozen=True, slots=True)
class PathResult:
    """Renderable path for a route: encoded polyline plus map bounds."""

    polyline: str
    bounds: Optional[Bounds]
    source: str


@dataclass(frozen=True, slots=True)
class Stop:
    sequence: int
    confirmation_id: str
    child_id: str
    child_name: str
    address: str
    reference: str
    location: Point
    cluster_index: int
    distance_km: float
    time_min: float


@dataclass(frozen=True, slots=True)
class RouteResult:
    origin: Point
    stops: tuple[Stop, ...]
    total_distance_km: float
    total_time_min: float
    num_clusters: int
    cluster_order: tuple[int, ...]
    polyline: str
    bounds: Optional[Bounds]
    polyline_source: str = POLYLINE_SOURCE_STRAIGHT_LINE

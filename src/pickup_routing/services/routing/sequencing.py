"""Greedy nearest-neighbour ordering of clusters and of the stops inside them.

Both passes start at an origin, repeatedly move to the closest unvisited
candidate and stop once every candidate has been visited. The result is a
heuristic ordering, not an optimal tour.
"""

from __future__ import annotations

from typing import Callable, Mapping, Sequence, TypeVar

from ...errors import InvalidCoordinateError
from ...models.domain import PickupRequest, Point
from ..geospatial import distance_km

T = TypeVar("T")


def _greedy_order(origin: Point, candidates: Sequence[T], locate: Callable[[T], Point]) -> list[int]:
    """Return candidate positions in nearest-first visiting order.

    Ties go to the earliest position in ``candidates``.
    """
    visited = [False] * len(candidates)
    order: list[int] = []
    current = origin

    for _ in range(len(candidates)):
        best_position = -1
        best_distance = float("inf")
        for position, candidate in enumerate(candidates):
            if visited[position]:
                continue
            distance = distance_km(current, locate(candidate))
            if distance < best_distance:
                best_distance = distance
                best_position = position
        if best_position < 0:
            raise InvalidCoordinateError(
                f"No finite distance from ({current.lat}, {current.lng}) to any remaining candidate."
            )
        visited[best_position] = True
        order.append(best_position)
        current = locate(candidates[best_position])

    return order


def order_clusters(origin: Point, centroids: Mapping[int, Point]) -> list[int]:
    """Order cluster indices nearest-centroid-first starting from ``origin``."""
    cluster_indices = sorted(centroids)
    positions = _greedy_order(origin, cluster_indices, lambda index: centroids[index])
    return [cluster_indices[position] for position in positions]


def order_stops(origin: Point, stops: Sequence[PickupRequest]) -> list[PickupRequest]:
    """Order pickups nearest-neighbour-first starting from ``origin``."""
    if not stops:
        return []
    positions = _greedy_order(origin, stops, lambda pickup: pickup.location)
    return [stops[position] for position in positions]

"""Stitch clustered, sequenced pickups into a single ordered route."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from ...config import settings
from ...errors import EmptyInputError, InvalidCoordinateError
from ...models.domain import PickupRequest, Point
from ..geospatial import distance_km
from .clustering import assign_clusters, cluster, compute_centroids, select_cluster_count
from .directions import DirectionsProvider, StraightLineDirections
from .models import RouteResult, Stop
from .sequencing import order_clusters, order_stops

DEFAULT_SPEED_KMH = 30.0
DEFAULT_DWELL_MINUTES = 2.0


def leg_time_minutes(
    leg_distance_km: float,
    speed_kmh: float = DEFAULT_SPEED_KMH,
    dwell_minutes: float = DEFAULT_DWELL_MINUTES,
) -> float:
    """Driving time for a leg at a constant speed plus the fixed stop dwell."""
    return (leg_distance_km / speed_kmh) * 60 + dwell_minutes


def _check_school(school: Point) -> None:
    try:
        Point.validated(school.lat, school.lng)
    except InvalidCoordinateError as exc:
        raise InvalidCoordinateError(f"School location is invalid: {exc.message}") from exc


def _check_pickup(pickup: PickupRequest) -> None:
    location = pickup.location
    # Non-finite pickups are left to the clusterer, which reports them as ClusteringError.
    if not (math.isfinite(location.lat) and math.isfinite(location.lng)):
        return
    try:
        Point.validated(location.lat, location.lng)
    except InvalidCoordinateError as exc:
        raise InvalidCoordinateError(f"Pickup {pickup.confirmation_id} is invalid: {exc.message}") from exc


class RouteAssembler:
    """Builds a RouteResult from a school location and its confirmed pickups.

    The pipeline is: choose the cluster count, k-means the pickups, visit the
    clusters nearest-centroid-first from the school, visit the stops of each
    cluster nearest-neighbour-first continuing from the last stop placed, and
    finally ask the directions provider for a renderable path.
    """

    def __init__(
        self,
        directions: DirectionsProvider | None = None,
        *,
        logger: logging.Logger | None = None,
        speed_kmh: float | None = None,
        dwell_minutes: float | None = None,
        random_state: int | None = None,
    ) -> None:
        self.directions = directions or StraightLineDirections()
        self.logger = logger or logging.getLogger(__name__)
        self.speed_kmh = speed_kmh if speed_kmh is not None else settings.average_speed_kmh
        self.dwell_minutes = dwell_minutes if dwell_minutes is not None else settings.dwell_minutes
        self.random_state = random_state

    def assemble(self, school: Point, pickups: Sequence[PickupRequest]) -> RouteResult:
        if not pickups:
            raise EmptyInputError("No confirmed pickups to optimize.")

        _check_school(school)
        for pickup in pickups:
            _check_pickup(pickup)

        self.logger.info(
            f"Starting route optimization: school=({school.lat}, {school.lng}), pickups={len(pickups)}"
        )

        points = [pickup.location for pickup in pickups]
        num_clusters = select_cluster_count(len(pickups))
        self.logger.info(f"Using {num_clusters} clusters for {len(pickups)} pickups")

        groups = cluster(points, num_clusters, random_state=self.random_state)
        assignments = assign_clusters(pickups, groups)
        centroids = compute_centroids(points, groups)
        cluster_order = order_clusters(school, centroids)
        self.logger.info(f"Cluster visiting order: {cluster_order}")

        members_by_cluster: dict[int, list[PickupRequest]] = {index: [] for index in cluster_order}
        for assignment in assignments:
            members_by_cluster[assignment.cluster_index].append(assignment.pickup)

        stops: list[Stop] = []
        total_distance = 0.0
        total_time = 0.0
        current = school

        for cluster_index in cluster_order:
            ordered = order_stops(current, members_by_cluster[cluster_index])
            self.logger.debug(f"Cluster {cluster_index}: {len(ordered)} stops sequenced")
            for pickup in ordered:
                leg_distance = distance_km(current, pickup.location)
                leg_time = leg_time_minutes(leg_distance, self.speed_kmh, self.dwell_minutes)
                total_distance += leg_distance
                total_time += leg_time
                stops.append(
                    Stop(
                        sequence=len(stops) + 1,
                        confirmation_id=pickup.confirmation_id,
                        child_id=pickup.child_id,
                        child_name=pickup.child_name,
                        address=pickup.address,
                        reference=pickup.reference,
                        location=pickup.location,
                        cluster_index=cluster_index,
                        distance_km=leg_distance,
                        time_min=leg_time,
                    )
                )
                current = pickup.location

        stop_points = [stop.location for stop in stops]
        path = self.directions.fetch_polyline(school, stop_points[-1], stop_points[:-1])
        self.logger.info(
            f"Polyline generated: source={path.source}, length={len(path.polyline)}, "
            f"bounds={path.bounds.as_dict() if path.bounds else None}"
        )

        result = RouteResult(
            origin=school,
            stops=tuple(stops),
            total_distance_km=total_distance,
            total_time_min=total_time,
            num_clusters=num_clusters,
            cluster_order=tuple(cluster_order),
            polyline=path.polyline,
            bounds=path.bounds,
            polyline_source=path.source,
        )
        self.logger.info(
            f"Route optimized: stops={len(stops)}, clusters={num_clusters}, "
            f"total_distance_km={total_distance:.2f}, total_time_min={total_time:.0f}"
        )
        return result


def assemble_route(
    school: Point,
    pickups: Sequence[PickupRequest],
    *,
    directions: DirectionsProvider | None = None,
    logger: logging.Logger | None = None,
) -> RouteResult:
    """Convenience wrapper around ``RouteAssembler(...).assemble``."""
    return RouteAssembler(directions, logger=logger).assemble(school, pickups)

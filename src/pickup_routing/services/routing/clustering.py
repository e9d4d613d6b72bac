"""K-means grouping of pickup points."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from sklearn.cluster import KMeans

from ...config import settings
from ...errors import ClusteringError, EmptyInputError
from ...models.domain import PickupRequest, Point
from .models import ClusterAssignment

logger = logging.getLogger(__name__)

# (max pickups, clusters); anything above the last threshold uses MAX_CLUSTERS
CLUSTER_COUNT_THRESHOLDS: tuple[tuple[int, int], ...] = ((5, 1), (10, 2), (15, 3), (25, 4))
MAX_CLUSTERS = 5


def select_cluster_count(pickup_count: int) -> int:
    """Number of clusters to use for ``pickup_count`` pickups."""
    for max_pickups, clusters in CLUSTER_COUNT_THRESHOLDS:
        if pickup_count <= max_pickups:
            return clusters
    return MAX_CLUSTERS


def cluster(
    points: Sequence[Point],
    k: int,
    *,
    random_state: int | None = None,
    max_iter: int | None = None,
) -> list[list[int]]:
    """Partition point indices into exactly ``k`` groups using Lloyd's k-means.

    Distances are Euclidean on raw latitude/longitude. When ``k`` exceeds the
    number of distinct points the trailing groups are returned empty.

    Raises:
        EmptyInputError: ``points`` is empty.
        ClusteringError: ``k`` is not positive, a coordinate is not finite, or
            k-means itself fails.
    """
    if not points:
        raise EmptyInputError("At least one point is required for clustering.")
    if k < 1:
        raise ClusteringError(f"Cluster count must be >= 1, got {k}.")

    coordinates = np.array([[point.lat, point.lng] for point in points], dtype=float)
    if not np.isfinite(coordinates).all():
        raise ClusteringError("Cannot cluster points with non-finite coordinates.")

    distinct_points = len(np.unique(coordinates, axis=0))
    fit_clusters = min(k, distinct_points)

    if fit_clusters == 1:
        labels = np.zeros(len(points), dtype=int)
    else:
        kmeans = KMeans(
            n_clusters=fit_clusters,
            algorithm="lloyd",
            random_state=settings.kmeans_random_state if random_state is None else random_state,
            n_init="auto",
            max_iter=max_iter or settings.kmeans_max_iter,
        )
        try:
            labels = kmeans.fit_predict(coordinates)
        except ValueError as exc:
            raise ClusteringError(f"K-means failed for {len(points)} points: {exc}") from exc

    groups: list[list[int]] = [[] for _ in range(k)]
    for index, label in enumerate(labels):
        groups[int(label)].append(index)

    logger.debug(
        f"Clustered {len(points)} points into {k} groups "
        f"(sizes={[len(group) for group in groups]}, distinct_points={distinct_points})"
    )
    return groups


def compute_centroids(points: Sequence[Point], groups: Sequence[Sequence[int]]) -> dict[int, Point]:
    """Arithmetic mean point of every non-empty group, keyed by group index."""
    centroids: dict[int, Point] = {}
    for cluster_index, members in enumerate(groups):
        if not members:
            continue
        lat, lng = np.array([points[i].as_tuple() for i in members], dtype=float).mean(axis=0)
        centroids[cluster_index] = Point(float(lat), float(lng))
    return centroids


def assign_clusters(
    pickups: Sequence[PickupRequest], groups: Sequence[Sequence[int]]
) -> list[ClusterAssignment]:
    """Tag every pickup with the index of the group that holds it."""
    assignments: list[ClusterAssignment] = []
    for cluster_index, members in enumerate(groups):
        for member in members:
            assignments.append(ClusterAssignment(pickup=pickups[member], cluster_index=cluster_index))
    return assignments

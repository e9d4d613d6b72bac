"""Error types raised by the route optimization engine."""

from __future__ import annotations


class RouteOptimizationError(Exception):
    """Base class for failures reported back to the caller of an optimization pass."""

    kind = "route_optimization_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class EmptyInputError(RouteOptimizationError):
    """No pickups (or no points) were supplied."""

    kind = "empty_input"


class ClusteringError(RouteOptimizationError):
    """K-means could not partition the supplied points."""

    kind = "clustering_error"


class InvalidCoordinateError(RouteOptimizationError, ValueError):
    """A latitude/longitude pair is outside the valid range."""

    kind = "invalid_coordinate"


class DirectionsProviderError(RouteOptimizationError):
    """The external directions API failed.

    Only raised inside the directions adapter, which converts it into the
    straight-line fallback before returning.
    """

    kind = "directions_provider_error"


class GeocodingError(RouteOptimizationError):
    """The external geocoding API failed. Converted to ``None`` by the client."""

    kind = "geocoding_error"

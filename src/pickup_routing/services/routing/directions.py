"""Road-following route geometry from an external directions API.

Every call path ends in a usable polyline: when the provider cannot be used
the straight-line encoding of the same stop sequence is returned instead.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

import httpx

from ...config import Settings, settings
from ...errors import DirectionsProviderError
from ...models.domain import Point
from ..geospatial import compute_bounds
from .models import POLYLINE_SOURCE_DIRECTIONS, Bounds, PathResult
from .polyline import encode_polyline, straight_line_path

logger = logging.getLogger(__name__)


class DirectionsProvider(ABC):
    """Contract for route geometry providers."""

    @abstractmethod
    def fetch_polyline(
        self,
        origin: Point,
        destination: Point,
        waypoints: Sequence[Point],
    ) -> PathResult:
        raise NotImplementedError

    @abstractmethod
    def regenerate_from_current_position(
        self,
        current_position: Point,
        remaining_stops: Sequence[Point],
        destination: Point,
    ) -> str:
        raise NotImplementedError


class StraightLineDirections(DirectionsProvider):
    """Joins the stops with straight segments. Needs no network access."""

    def fetch_polyline(self, origin: Point, destination: Point, waypoints: Sequence[Point]) -> PathResult:
        return straight_line_path([origin, *waypoints, destination])

    def regenerate_from_current_position(
        self,
        current_position: Point,
        remaining_stops: Sequence[Point],
        destination: Point,
    ) -> str:
        return encode_polyline([current_position, *remaining_stops, destination])


def _format_point(point: Point) -> str:
    return f"{point.lat},{point.lng}"


def _parse_bounds(raw: Any) -> Bounds | None:
    try:
        southwest = raw["southwest"]
        northeast = raw["northeast"]
        return Bounds(
            southwest=Point(float(southwest["lat"]), float(southwest["lng"])),
            northeast=Point(float(northeast["lat"]), float(northeast["lng"])),
        )
    except (KeyError, TypeError, ValueError):
        return None


class GoogleDirectionsAdapter(DirectionsProvider):
    """Google Directions API client with straight-line fallback."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_waypoints: int | None = None,
        optimize_waypoints: bool | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.base_url = base_url or settings.directions_base_url
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_waypoints = max_waypoints if max_waypoints is not None else settings.max_waypoints
        self.optimize_waypoints = (
            optimize_waypoints if optimize_waypoints is not None else settings.optimize_waypoints
        )
        self._client = client

    def _build_params(
        self,
        origin: Point,
        destination: Point,
        waypoints: Sequence[Point],
        *,
        optimize: bool,
    ) -> dict[str, str]:
        params = {
            "origin": _format_point(origin),
            "destination": _format_point(destination),
            "key": self.api_key or "",
        }
        sent = list(waypoints[: self.max_waypoints])
        if len(waypoints) > len(sent):
            logger.info(
                f"Directions request limited to {self.max_waypoints} waypoints "
                f"({len(waypoints) - len(sent)} dropped from the request)"
            )
        if sent:
            joined = "|".join(_format_point(point) for point in sent)
            params["waypoints"] = f"optimize:true|{joined}" if optimize else joined
        return params

    def _request_route(self, params: dict[str, str]) -> dict:
        """Return the first route of a successful response or raise DirectionsProviderError."""
        if not self.api_key:
            raise DirectionsProviderError("Directions API key is not configured.")

        client = self._client or httpx.Client(timeout=httpx.Timeout(self.timeout))
        try:
            response = client.get(self.base_url, params=params)
        except httpx.TimeoutException as exc:
            raise DirectionsProviderError(f"Directions request timed out after {self.timeout}s: {exc}") from exc
        except httpx.HTTPError as exc:
            raise DirectionsProviderError(f"Directions request failed: {exc}") from exc
        except Exception as exc:
            # InvalidURL and transport-level errors outside the HTTPError hierarchy
            raise DirectionsProviderError(f"Directions request could not be sent: {exc!r}") from exc
        finally:
            if self._client is None:
                client.close()

        if response.status_code != httpx.codes.OK:
            raise DirectionsProviderError(f"Directions API returned HTTP {response.status_code}.")

        try:
            data = response.json()
        except ValueError as exc:
            raise DirectionsProviderError(f"Directions API returned invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise DirectionsProviderError("Directions API returned an unexpected payload.")

        routes = data.get("routes")
        if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
            raise DirectionsProviderError(
                f"Directions API returned no route "
                f"(status={data.get('status', 'UNKNOWN')}, error={data.get('error_message')})."
            )

        route = routes[0]
        overview = route.get("overview_polyline")
        points = overview.get("points") if isinstance(overview, dict) else None
        if not isinstance(points, str) or not points:
            raise DirectionsProviderError("Directions API route has no overview polyline.")
        return route

    def fetch_polyline(self, origin: Point, destination: Point, waypoints: Sequence[Point]) -> PathResult:
        full_path = [origin, *waypoints, destination]
        params = self._build_params(origin, destination, waypoints, optimize=self.optimize_waypoints)
        try:
            route = self._request_route(params)
        except DirectionsProviderError as exc:
            logger.warning(f"Could not get directions polyline: {exc} Using straight-line polyline.")
            return straight_line_path(full_path)

        polyline = route["overview_polyline"]["points"]
        bounds = _parse_bounds(route.get("bounds")) or compute_bounds(full_path)
        logger.info(f"Directions polyline received (length={len(polyline)}, waypoints={len(waypoints)})")
        return PathResult(polyline=polyline, bounds=bounds, source=POLYLINE_SOURCE_DIRECTIONS)

    def regenerate_from_current_position(
        self,
        current_position: Point,
        remaining_stops: Sequence[Point],
        destination: Point,
    ) -> str:
        logger.info(
            f"Regenerating polyline from ({current_position.lat}, {current_position.lng}) "
            f"through {len(remaining_stops)} pending stops"
        )
        params = self._build_params(current_position, destination, remaining_stops, optimize=False)
        try:
            route = self._request_route(params)
        except DirectionsProviderError as exc:
            logger.warning(f"Could not regenerate directions polyline: {exc} Using straight-line polyline.")
            return encode_polyline([current_position, *remaining_stops, destination])
        return route["overview_polyline"]["points"]


def get_directions_provider(config: Settings | None = None) -> DirectionsProvider:
    """Google directions when an API key is configured, straight lines otherwise."""
    config = config or settings
    if config.google_maps_api_key:
        return GoogleDirectionsAdapter(
            api_key=config.google_maps_api_key,
            base_url=config.directions_base_url,
            timeout=config.http_timeout_seconds,
            max_waypoints=config.max_waypoints,
            optimize_waypoints=config.optimize_waypoints,
        )
    logger.warning("Google Maps API key is not configured; route polylines will use straight lines.")
    return StraightLineDirections()

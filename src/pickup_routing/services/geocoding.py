"""Address geocoding used to resolve school and pickup locations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import settings
from ..errors import GeocodingError
from ..models.domain import Point
from .geospatial import is_valid_coordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GeocodedLocation:
    location: Point
    formatted_address: Optional[str]
    location_type: Optional[str]


class GeocodingClient:
    """Google Geocoding API client.

    Lookups never raise: a failed lookup is logged and returns ``None`` so the
    caller can decide whether route generation may proceed.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        region: str | None = None,
        language: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.base_url = base_url or settings.geocoding_base_url
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.region = region or settings.geocoding_region
        self.language = language or settings.geocoding_language
        self._client = client

    def _first_result(self, params: dict[str, str]) -> dict:
        client = self._client or httpx.Client(timeout=httpx.Timeout(self.timeout))
        try:
            response = client.get(self.base_url, params={**params, "key": self.api_key or ""})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise GeocodingError(f"Geocoding request failed: {exc}") from exc
        except ValueError as exc:
            raise GeocodingError(f"Geocoding API returned invalid JSON: {exc}") from exc
        except Exception as exc:
            raise GeocodingError(f"Geocoding request could not be sent: {exc!r}") from exc
        finally:
            if self._client is None:
                client.close()

        status = data.get("status") if isinstance(data, dict) else None
        if status != "OK":
            raise GeocodingError(f"Geocoding API status {status}.")
        results = data.get("results") or []
        if not results:
            raise GeocodingError("Geocoding API returned no results.")
        return results[0]

    def geocode(self, address: str) -> GeocodedLocation | None:
        """Coordinates of ``address`` or None when it cannot be resolved."""
        if not address or not address.strip():
            logger.warning("Geocoding skipped: empty address")
            return None
        if not self.api_key:
            logger.warning("Geocoding skipped: Google Maps API key is not configured")
            return None

        logger.info(f"Geocoding address: {address}")
        try:
            result = self._first_result(
                {"address": address, "region": self.region, "language": self.language}
            )
            geometry = result["geometry"]
            lat = float(geometry["location"]["lat"])
            lng = float(geometry["location"]["lng"])
        except GeocodingError as exc:
            logger.warning(f"Could not geocode '{address}': {exc}")
            return None
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Could not geocode '{address}': malformed result ({exc})")
            return None

        if not is_valid_coordinate(lat, lng, reject_null_island=True):
            logger.warning(f"Geocoder returned invalid coordinates ({lat}, {lng}) for '{address}'")
            return None

        return GeocodedLocation(
            location=Point(lat, lng),
            formatted_address=result.get("formatted_address"),
            location_type=geometry.get("location_type"),
        )

    def reverse_geocode(self, point: Point) -> str | None:
        """Formatted address nearest to ``point`` or None."""
        if not self.api_key:
            return None
        try:
            result = self._first_result(
                {"latlng": f"{point.lat},{point.lng}", "language": self.language}
            )
        except GeocodingError as exc:
            logger.warning(f"Reverse geocoding failed for ({point.lat}, {point.lng}): {exc}")
            return None
        return result.get("formatted_address")

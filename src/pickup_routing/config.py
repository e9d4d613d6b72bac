"""Application configuration and settings management."""

from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PICKUP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "School Pickup Route Optimizer"
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps API key used for directions and geocoding requests.",
    )
    directions_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api/directions/json",
        description="Directions API endpoint returning JSON routes.",
    )
    geocoding_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api/geocode/json",
        description="Geocoding API endpoint returning JSON results.",
    )
    http_timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_waypoints: int = Field(
        default=25,
        ge=1,
        description="Maximum intermediate waypoints accepted by the directions provider.",
    )
    optimize_waypoints: bool = Field(
        default=True,
        description="Ask the directions provider to reorder waypoints when generating a route.",
    )
    average_speed_kmh: float = Field(default=30.0, gt=0.0, description="Assumed urban driving speed.")
    dwell_minutes: float = Field(default=2.0, ge=0.0, description="Fixed time spent at every stop.")
    kmeans_random_state: Optional[int] = Field(default=42)
    kmeans_max_iter: int = Field(default=300, ge=1)
    geocoding_region: str = "mx"
    geocoding_language: str = "es"

    @field_validator("google_maps_api_key", mode="before")
    @classmethod
    def _blank_key_is_none(cls, value: Any) -> Optional[str]:
        """Treat empty or whitespace-only keys as not configured."""
        if value is None:
            return None
        text = str(value).strip()
        return text or None


settings = Settings()

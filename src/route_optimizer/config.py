"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTEOPT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Itinerary Route Optimizer API"
    api_prefix: str = "/api"
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Server key for the Google Distance Matrix API.",
    )
    distance_matrix_url: str = Field(
        default="https://maps.googleapis.com/maps/api/distancematrix/json",
        description="Endpoint of the travel-time matrix provider.",
    )
    default_travel_mode: Literal["driving", "walking", "bicycling", "transit"] = Field(
        default="driving",
        description="Travel mode used when a request does not specify one.",
    )
    distance_matrix_timeout_seconds: float = Field(default=15.0, gt=0.0)
    distance_matrix_max_retries: int = Field(default=2, ge=0)
    distance_matrix_backoff_seconds: float = Field(default=0.5, ge=0.0)
    travel_cache_max_entries: int = Field(
        default=512,
        ge=1,
        description="Upper bound on cached travel-time payloads before eviction kicks in.",
    )
    travel_cache_ttl_seconds: float = Field(
        default=6 * 60 * 60,
        gt=0.0,
        description="Seconds a cached travel-time payload stays valid.",
    )
    unreachable_sentinel: float = Field(
        default=999999999,
        gt=0,
        description="Wire value standing in for 'no known route' in cost matrices.",
    )
    fallback_speed_kmh: float = Field(
        default=40.0,
        gt=0.0,
        description="Average speed used to turn haversine kilometres into seconds when mixing with matrix costs.",
    )
    two_opt_scan_factor: int = Field(
        default=2,
        ge=1,
        description="Maximum 2-opt scans per tour, as a multiple of the node count.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()

"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_provider_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.distance_matrix_client import check_health as provider_health_check
    return provider_health_check


@router.get("/health/distance-matrix", status_code=status.HTTP_200_OK)
def health_distance_matrix() -> dict:
    """Check the travel-time provider and report cache usage."""
    from ...services.routing.travel_times import travel_time_service

    cache_stats = travel_time_service.cache.stats
    if not settings.google_maps_api_key:
        return {
            "service": "distance-matrix",
            "configured": False,
            "healthy": False,
            "message": "Set ROUTEOPT_GOOGLE_MAPS_API_KEY to enable travel-time lookups; haversine is used meanwhile.",
            "cache": cache_stats,
        }
    provider_health_check = _get_provider_health_check()
    return {
        "service": "distance-matrix",
        "configured": True,
        "healthy": provider_health_check(),
        "cache": cache_stats,
    }

"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Location

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def location_distance_km(origin: Location, destination: Location) -> float:
    return haversine_km(origin.lat, origin.lng, destination.lat, destination.lng)


def km_to_seconds(distance_km: float, speed_kmh: float) -> float:
    """Estimate travel seconds for a straight-line distance at an average speed."""

    return (distance_km / speed_kmh) * 3600.0

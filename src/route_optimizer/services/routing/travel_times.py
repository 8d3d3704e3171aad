"""Cached travel-time lookups feeding the place-level cost matrix."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ...config import settings
from ...models.domain import UNREACHABLE, CostMatrix, EdgeCost, Location
from .cache import TravelTimeCache
from .distance_matrix_client import Coordinate, DistanceMatrixClient, format_coordinates

logger = logging.getLogger(__name__)

STATUS_OK = "OK"


@dataclass(slots=True)
class MatrixLookup:
    status: str
    payload: dict
    cached: bool

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


def make_cache_key(origins: Sequence[Coordinate], destinations: Sequence[Coordinate], mode: str) -> str:
    return f"{format_coordinates(origins)}-{format_coordinates(destinations)}-{mode}"


def _element_cost(element: dict) -> EdgeCost:
    if element.get("status") != STATUS_OK:
        return UNREACHABLE
    duration = element.get("duration") or {}
    value = duration.get("value")
    if value is None:
        return UNREACHABLE
    return float(value)


def payload_to_matrix(payload: dict, size: int) -> Optional[CostMatrix]:
    """Turn a provider payload into a ``size`` x ``size`` matrix of seconds."""
    rows = payload.get("rows") or []
    if len(rows) != size:
        return None
    matrix: CostMatrix = []
    for row in rows:
        elements = row.get("elements") or []
        if len(elements) != size:
            return None
        matrix.append([_element_cost(element) for element in elements])
    return matrix


class TravelTimeService:
    """Front the distance matrix provider with a bounded cache.

    Only successful payloads are cached, so a failed lookup is retried on the
    next request. Identical concurrent lookups may both reach the provider;
    the cached value is the same either way.
    """

    def __init__(
        self,
        cache: Optional[TravelTimeCache] = None,
        client_factory: Optional[Callable[[], DistanceMatrixClient]] = None,
    ) -> None:
        self.cache = cache if cache is not None else TravelTimeCache()
        self._client_factory = client_factory

    def _client(self) -> DistanceMatrixClient:
        if self._client_factory is not None:
            return self._client_factory()
        return DistanceMatrixClient()

    def lookup(
        self,
        origins: Sequence[Coordinate],
        destinations: Sequence[Coordinate],
        mode: Optional[str] = None,
    ) -> MatrixLookup:
        """Return the provider payload for the request, from cache when possible.

        Raises ValueError when the provider is not configured and
        ConnectionError when it cannot be reached.
        """
        travel_mode = mode or settings.default_travel_mode
        key = make_cache_key(origins, destinations, travel_mode)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Serving travel times from cache: {key}")
            return MatrixLookup(status=cached.get("status", STATUS_OK), payload=cached, cached=True)

        payload = self._client().fetch(origins, destinations, travel_mode)
        status = payload.get("status", "UNKNOWN")
        if status == STATUS_OK:
            self.cache.set(key, payload)
        else:
            logger.error(f"Distance matrix provider returned status {status}: {payload.get('error_message', '')}")
        return MatrixLookup(status=status, payload=payload, cached=False)

    def place_matrix(self, places: Sequence[Location], mode: Optional[str] = None) -> Optional[CostMatrix]:
        """Fetch the all-to-all travel-time matrix for ``places``.

        Any failure degrades to None so the optimizer falls back to haversine.
        """
        if len(places) < 2:
            return None
        coordinates = [(place.lat, place.lng) for place in places]
        try:
            result = self.lookup(coordinates, coordinates, mode)
        except (ValueError, ConnectionError) as e:
            logger.warning(f"Travel-time lookup unavailable: {e}. Using haversine fallback.")
            return None
        if not result.ok:
            logger.warning(f"Travel-time lookup returned status {result.status}. Using haversine fallback.")
            return None
        matrix = payload_to_matrix(result.payload, len(places))
        if matrix is None:
            logger.warning("Travel-time payload does not match the requested places. Using haversine fallback.")
            return None
        unreachable = sum(1 for row in matrix for value in row if value is UNREACHABLE)
        if unreachable:
            logger.info(f"{unreachable} place-to-place legs have no known route")
        return matrix


travel_time_service = TravelTimeService()

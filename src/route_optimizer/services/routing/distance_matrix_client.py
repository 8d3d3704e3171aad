"""HTTP client for the Google Distance Matrix API."""

from __future__ import annotations

import logging
import time
from typing import Sequence

import httpx

from ...config import settings

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float]


def format_coordinates(coordinates: Sequence[Coordinate]) -> str:
    """Render (lat, lng) pairs the way the provider expects: ``lat,lng|lat,lng``."""
    return "|".join(f"{lat},{lng}" for lat, lng in coordinates)


class DistanceMatrixClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.base_url = base_url or settings.distance_matrix_url
        self.timeout = timeout if timeout is not None else settings.distance_matrix_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.distance_matrix_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.distance_matrix_backoff_seconds
        )
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def fetch(
        self,
        origins: Sequence[Coordinate],
        destinations: Sequence[Coordinate],
        mode: str = "driving",
    ) -> dict:
        """Request travel times between every origin and destination.

        Returns the provider payload as-is; callers inspect its ``status``.
        Raises ConnectionError when the provider stays unreachable after retries.
        """
        if not origins or not destinations:
            raise ValueError("At least one origin and one destination are required.")

        params = {
            "origins": format_coordinates(origins),
            "destinations": format_coordinates(destinations),
            "mode": mode,
            "key": self.api_key,
        }

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(self.base_url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise ConnectionError(
                            f"Distance matrix service returned {type(data).__name__}, expected a JSON object"
                        )
                    return data
                except httpx.HTTPStatusError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Distance matrix request failed with HTTP {e.response.status_code}"
                        ) from e
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TransportError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Distance matrix request failed after {self.max_retries} retries: {e}")
                        raise ConnectionError(f"Failed to reach distance matrix service: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"Distance matrix network error, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {e}"
                    )
                    time.sleep(wait_time)
        finally:
            client.close()


def check_health(api_key: str | None = None) -> bool:
    """Check the provider answers a minimal one-by-one request with status OK."""
    key = api_key or settings.google_maps_api_key
    if not key:
        return False
    try:
        client = DistanceMatrixClient(api_key=key, max_retries=0)
        data = client.fetch([(52.517037, 13.388860)], [(52.496891, 13.385983)])
        return data.get("status") == "OK"
    except (ConnectionError, ValueError):
        return False

"""Cached travel-time matrix endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import DistanceMatrixRequest
from ...services.routing import travel_times

router = APIRouter(tags=["distance-matrix"])

logger = logging.getLogger(__name__)


@router.post("/distance-matrix", status_code=status.HTTP_200_OK)
def distance_matrix(payload: DistanceMatrixRequest) -> dict:
    if not payload.origins or not payload.destinations:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Origins and destinations are required",
        )

    origins = [(point.lat, point.lng) for point in payload.origins]
    destinations = [(point.lat, point.lng) for point in payload.destinations]
    try:
        result = travel_times.travel_time_service.lookup(origins, destinations, payload.mode)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except ConnectionError as exc:
        logger.error(f"Distance matrix provider unreachable: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to fetch distance matrix", "details": str(exc)},
        ) from exc

    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to fetch distance matrix", "details": result.payload},
        )
    return result.payload

"""Routing orchestration service."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...models.domain import Location
from ...schemas.routing import LocationModel, OptimizeRouteRequest, OptimizeRouteResponse
from ..outputs.route_formatter import optimized_route_to_csv
from . import travel_times
from .errors import InvalidInputError
from .grouping import declared_places
from .hierarchy import solve_hierarchical_route
from .models import OptimizedRoute
from .travel_times import TravelTimeService

logger = logging.getLogger(__name__)

MIN_LOCATIONS = 2
SPECIFIC_LOCATION_ENDPOINT = "specific_location"


def _to_domain(models: Sequence[LocationModel]) -> list[Location]:
    return [
        Location(id=model.id, name=model.name, lat=model.lat, lng=model.lng, parent_id=model.parent_id)
        for model in models
    ]


def _to_model(location: Location) -> LocationModel:
    return LocationModel(
        id=location.id,
        name=location.name,
        lat=location.lat,
        lng=location.lng,
        parent_id=location.parent_id,
    )


def resolve_endpoint_id(payload: OptimizeRouteRequest, locations: Sequence[Location]) -> Optional[str]:
    """Pick the location that must end the tour.

    An explicit ``endpoint_id`` wins. Otherwise the lock flag, or an end-point
    configuration of type ``specific_location``, pins the last declared place.
    """
    if payload.endpoint_id:
        return payload.endpoint_id
    end_point = payload.config.end_point if payload.config else None
    lock = payload.lock_endpoint or (end_point is not None and end_point.type == SPECIFIC_LOCATION_ENDPOINT)
    if not lock:
        return None
    places = declared_places(locations)
    return places[-1].id if places else None


def run_optimization(
    payload: OptimizeRouteRequest,
    travel_time_service: TravelTimeService | None = None,
) -> OptimizedRoute:
    if len(payload.locations) < MIN_LOCATIONS:
        raise InvalidInputError(f"At least {MIN_LOCATIONS} locations are required.")

    locations = _to_domain(payload.locations)
    places = declared_places(locations)
    logger.info(
        f"Optimizing route for {len(locations)} locations ({len(places)} places), mode={payload.mode}"
    )

    cost_matrix = payload.cost_matrix
    matrix_origin = "request" if cost_matrix is not None else "none"
    if cost_matrix is None and len(places) > 1:
        service = travel_time_service or travel_times.travel_time_service
        cost_matrix = service.place_matrix(places, payload.mode)
        if cost_matrix is not None:
            matrix_origin = "provider"
    elif len(places) <= 1:
        logger.info("Only one place, skipping travel-time lookup")

    endpoint_id = resolve_endpoint_id(payload, locations)
    route = solve_hierarchical_route(locations, cost_matrix, endpoint_id=endpoint_id)
    route.metadata["matrix_origin"] = matrix_origin
    route.metadata["endpoint_locked"] = endpoint_id is not None
    if payload.mode:
        route.metadata["mode"] = payload.mode
    logger.debug(f"Optimized order: {[location.name for location in route.locations]}")
    return route


def optimize_route(
    payload: OptimizeRouteRequest,
    travel_time_service: TravelTimeService | None = None,
) -> OptimizeRouteResponse:
    route = run_optimization(payload, travel_time_service)
    return OptimizeRouteResponse(
        optimized_path=[_to_model(location) for location in route.locations],
        metadata=route.metadata,
    )


def export_route_csv(
    payload: OptimizeRouteRequest,
    travel_time_service: TravelTimeService | None = None,
) -> str:
    return optimized_route_to_csv(run_optimization(payload, travel_time_service))

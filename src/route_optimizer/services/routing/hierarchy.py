"""Two-level ordering of places and their points of interest.

Places are ordered with real travel times when a matrix is available and with
great-circle distance otherwise. Points of interest inside a place are always
ordered by great-circle distance, then spliced in right after their place.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ...config import settings
from ...models.domain import CostMatrix, EdgeCost, Location
from ..geospatial import km_to_seconds, location_distance_km
from .errors import InvalidInputError
from .grouping import declared_places, group_locations
from .matrix import is_square, parse_cost_matrix
from .models import OptimizedRoute, PlaceGroup, TourResult
from .solver import solve_tour

logger = logging.getLogger(__name__)

COST_SOURCE_MATRIX = "travel_matrix"
COST_SOURCE_HAVERSINE = "haversine"


def _resolve_endpoint(groups: Sequence[PlaceGroup], endpoint_id: str) -> int:
    for index, group in enumerate(groups):
        if group.place.id == endpoint_id:
            return index
        if any(poi.id == endpoint_id for poi in group.pois):
            return index
    raise InvalidInputError(f"Endpoint location '{endpoint_id}' is not part of the request.")


def _place_cost(groups: Sequence[PlaceGroup], matrix: Optional[CostMatrix]):
    def cost(origin: int, destination: int) -> EdgeCost:
        source, target = groups[origin], groups[destination]
        if matrix is None:
            return location_distance_km(source.place, target.place)
        if source.matrix_index is not None and target.matrix_index is not None:
            return matrix[source.matrix_index][target.matrix_index]
        # Promoted orphans have no matrix row; estimate seconds to keep units aligned.
        return km_to_seconds(location_distance_km(source.place, target.place), settings.fallback_speed_kmh)

    return cost


def _poi_cost(pois: Sequence[Location]):
    def cost(origin: int, destination: int) -> EdgeCost:
        return location_distance_km(pois[origin], pois[destination])

    return cost


def _closest_to(anchor: Location, candidates: Sequence[Location]) -> int:
    best_index = 0
    best_distance = location_distance_km(anchor, candidates[0])
    for index in range(1, len(candidates)):
        distance = location_distance_km(anchor, candidates[index])
        if distance < best_distance:
            best_index = index
            best_distance = distance
    return best_index


def _usable_matrix(cost_matrix: Optional[Sequence[Sequence[Any]]], place_count: int) -> Optional[CostMatrix]:
    if cost_matrix is None:
        return None
    if not is_square(cost_matrix, place_count):
        logger.warning(
            f"Ignoring cost matrix: expected {place_count}x{place_count} for the declared places, "
            f"got {len(cost_matrix)} rows. Falling back to haversine distances."
        )
        return None
    return parse_cost_matrix(cost_matrix)


def order_places(
    groups: Sequence[PlaceGroup],
    matrix: Optional[CostMatrix],
    endpoint_index: Optional[int] = None,
) -> TourResult:
    """Solve the place-level tour. Returns group indices in visiting order."""
    if len(groups) < 2:
        return TourResult(order=list(range(len(groups))), total_cost=0.0)
    return solve_tour(len(groups), _place_cost(groups, matrix), fixed_end=endpoint_index)


def order_points_of_interest(place: Location, pois: Sequence[Location]) -> TourResult:
    """Solve the tour over one place's points of interest, leaving from the place."""
    if not pois:
        return TourResult(order=[], total_cost=0.0)
    return solve_tour(len(pois), _poi_cost(pois), start=_closest_to(place, pois))


def solve_hierarchical_route(
    locations: Sequence[Location],
    cost_matrix: Optional[Sequence[Sequence[Any]]] = None,
    *,
    endpoint_id: Optional[str] = None,
) -> OptimizedRoute:
    """Order every location into one flat itinerary.

    Args:
        locations: Places and points of interest, in request order.
        cost_matrix: Place-to-place travel seconds aligned with the places
            (locations without a parent) in input order. Null, infinite or
            sentinel entries mean the leg is unreachable.
        endpoint_id: Location that must close the place-level tour. A point
            of interest id pins its parent place.

    Returns:
        OptimizedRoute listing each input location exactly once, every point
        of interest directly after its place block.
    """
    if not locations:
        return OptimizedRoute(
            locations=[],
            total_cost=0.0,
            cost_source=COST_SOURCE_HAVERSINE,
            metadata={"place_count": 0, "poi_count": 0, "orphan_count": 0},
        )

    groups = group_locations(locations)
    matrix = _usable_matrix(cost_matrix, len(declared_places(locations)))
    cost_source = COST_SOURCE_MATRIX if matrix is not None else COST_SOURCE_HAVERSINE

    endpoint_index = _resolve_endpoint(groups, endpoint_id) if endpoint_id is not None else None
    if endpoint_index is not None and len(groups) < 2:
        endpoint_index = None

    place_tour = order_places(groups, matrix, endpoint_index)

    ordered: list[Location] = []
    poi_distance_km = 0.0
    for group_index in place_tour.order:
        group = groups[group_index]
        ordered.append(group.place)
        poi_tour = order_points_of_interest(group.place, group.pois)
        ordered.extend(group.pois[index] for index in poi_tour.order)
        poi_distance_km += poi_tour.total_cost
        if group.pois:
            poi_distance_km += location_distance_km(group.place, group.pois[poi_tour.order[0]])

    if len(ordered) != len(locations):
        # Grouping guarantees full coverage; this guards against regressions.
        raise RuntimeError(f"Optimized route lost locations: {len(ordered)} of {len(locations)}.")

    metadata = {
        "place_count": len(groups),
        "poi_count": sum(len(group.pois) for group in groups),
        "orphan_count": sum(1 for group in groups if group.promoted),
        "cost_source": cost_source,
        "endpoint_id": groups[endpoint_index].place.id if endpoint_index is not None else None,
        "place_tour_cost": place_tour.total_cost,
        "poi_distance_km": poi_distance_km,
        "unreachable_legs": place_tour.unreachable_legs,
        "two_opt_improvements": place_tour.improvements,
    }
    logger.info(
        f"Optimized {len(ordered)} locations ({metadata['place_count']} places, "
        f"{metadata['poi_count']} points of interest) using {cost_source} costs"
    )
    return OptimizedRoute(
        locations=ordered,
        total_cost=place_tour.total_cost,
        cost_source=cost_source,
        metadata=metadata,
    )

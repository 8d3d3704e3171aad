"""Partition a flat stop list into places and their points of interest."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import Location, LocationKind
from .errors import InvalidInputError
from .models import PlaceGroup

logger = logging.getLogger(__name__)


def declared_places(locations: Sequence[Location]) -> list[Location]:
    """Return the locations without a parent, in input order.

    This is the subsequence a supplied cost matrix is aligned with.
    """
    return [location for location in locations if location.kind is LocationKind.PLACE]


def group_locations(locations: Sequence[Location]) -> list[PlaceGroup]:
    """Group points of interest under their parent places.

    Places keep their input order and so do the points of interest of each
    place. A point of interest whose parent is not among the declared places
    is promoted to a place of its own at its input position.
    """
    if not locations:
        raise InvalidInputError("At least one location is required.")

    seen: set[str] = set()
    for location in locations:
        if location.id in seen:
            raise InvalidInputError(f"Duplicate location id '{location.id}'.")
        seen.add(location.id)

    place_ids = {location.id for location in declared_places(locations)}

    groups: list[PlaceGroup] = []
    by_place_id: dict[str, PlaceGroup] = {}
    matrix_index = 0
    for location in locations:
        if location.kind is LocationKind.PLACE:
            group = PlaceGroup(place=location, pois=[], matrix_index=matrix_index)
            matrix_index += 1
        elif location.parent_id not in place_ids:
            logger.warning(
                f"Point of interest '{location.id}' references unknown place '{location.parent_id}'; "
                f"treating it as a place"
            )
            group = PlaceGroup(place=location, pois=[], matrix_index=None, promoted=True)
        else:
            continue
        groups.append(group)
        by_place_id[location.id] = group

    for location in locations:
        if location.kind is LocationKind.POINT_OF_INTEREST and location.parent_id in place_ids:
            by_place_id[location.parent_id].pois.append(location)

    return groups

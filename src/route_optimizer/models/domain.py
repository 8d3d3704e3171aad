"""Domain models for itinerary stops and travel costs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class LocationKind(str, Enum):
    """Discriminant of the place / point-of-interest union."""

    PLACE = "place"
    POINT_OF_INTEREST = "point_of_interest"


@dataclass(frozen=True, slots=True)
class Location:
    """A stop in a day's itinerary.

    A location carrying ``parent_id`` is a point of interest nested under the
    place with that id; without it the location is a top-level place.
    """

    id: str
    name: str
    lat: float
    lng: float
    parent_id: Optional[str] = None

    @property
    def kind(self) -> LocationKind:
        if self.parent_id is None:
            return LocationKind.PLACE
        return LocationKind.POINT_OF_INTEREST


class Unreachable(Enum):
    """Marker for a leg with no known route."""

    TOKEN = "unreachable"

    def __repr__(self) -> str:
        return "UNREACHABLE"


UNREACHABLE = Unreachable.TOKEN

# Either a known non-negative cost or the unreachable marker.
EdgeCost = Union[float, Unreachable]
CostMatrix = list[list[EdgeCost]]

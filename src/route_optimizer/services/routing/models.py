"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ...models.domain import Location


@dataclass(slots=True)
class PlaceGroup:
    place: Location
    pois: List[Location]
    # Row/column of this place in the supplied cost matrix; None for promoted orphans.
    matrix_index: Optional[int] = None
    promoted: bool = False


@dataclass(slots=True)
class TourResult:
    order: List[int]
    total_cost: float
    scans: int = 0
    improvements: int = 0
    unreachable_legs: int = 0


@dataclass(slots=True)
class OptimizedRoute:
    locations: List[Location]
    total_cost: float
    cost_source: str
    metadata: dict = field(default_factory=dict)

"""Conversion between wire-format cost matrices and explicit edge costs."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Optional, Sequence

from ...config import settings
from ...models.domain import UNREACHABLE, CostMatrix, EdgeCost


def _edge_from_wire(value: Any, sentinel: float) -> EdgeCost:
    if value is None or value is UNREACHABLE:
        return UNREACHABLE
    if isinstance(value, Real) and not isinstance(value, bool):
        if math.isinf(value) or value >= sentinel:
            return UNREACHABLE
    # Anything else is passed through and rejected by the solver if malformed.
    return value


def parse_cost_matrix(raw: Sequence[Sequence[Any]], sentinel: Optional[float] = None) -> CostMatrix:
    """Replace nulls, infinities and sentinel values with ``UNREACHABLE``."""
    limit = sentinel if sentinel is not None else settings.unreachable_sentinel
    return [[_edge_from_wire(value, limit) for value in row] for row in raw]


def is_square(matrix: Sequence[Sequence[Any]], size: int) -> bool:
    return len(matrix) == size and all(len(row) == size for row in matrix)

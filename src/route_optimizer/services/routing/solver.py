"""Open-path tour solver: nearest-neighbour construction followed by 2-opt.

The solver orders ``node_count`` nodes so that the sum of consecutive leg
costs is approximately minimal. The path does not return to its start.
Unreachable legs are replaced by a finite penalty larger than the sum of all
known legs, so every node is still visited exactly once.
"""

from __future__ import annotations

import logging
import math
from numbers import Real
from typing import Callable, Optional, Sequence

from ...config import settings
from ...models.domain import UNREACHABLE, EdgeCost
from .errors import InvalidInputError, MalformedCostError
from .models import TourResult

logger = logging.getLogger(__name__)

CostFunction = Callable[[int, int], EdgeCost]


def _checked_cost(value: object, origin: int, destination: int) -> Optional[float]:
    """Return a finite cost, or None for an unreachable leg."""
    if value is UNREACHABLE:
        return None
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedCostError(
            f"Cost from node {origin} to node {destination} is not numeric: {value!r}"
        )
    numeric = float(value)
    if math.isnan(numeric):
        raise MalformedCostError(f"Cost from node {origin} to node {destination} is NaN.")
    if numeric < 0:
        raise MalformedCostError(
            f"Cost from node {origin} to node {destination} is negative: {numeric}"
        )
    if math.isinf(numeric):
        return None
    return numeric


def build_cost_table(node_count: int, cost: CostFunction) -> tuple[list[list[float]], set[tuple[int, int]]]:
    """Evaluate ``cost`` for every ordered pair and apply the unreachable penalty.

    Returns the penalised table and the set of unreachable (origin, destination) pairs.
    """
    table = [[0.0] * node_count for _ in range(node_count)]
    unreachable: set[tuple[int, int]] = set()
    known_total = 0.0
    for origin in range(node_count):
        for destination in range(node_count):
            if origin == destination:
                continue
            value = _checked_cost(cost(origin, destination), origin, destination)
            if value is None:
                unreachable.add((origin, destination))
                continue
            table[origin][destination] = value
            known_total += value

    if unreachable:
        penalty = known_total + 1.0
        for origin, destination in unreachable:
            table[origin][destination] = penalty
        logger.debug(f"{len(unreachable)} unreachable legs penalised at {penalty:.1f}")
    return table, unreachable


def path_cost(order: Sequence[int], table: Sequence[Sequence[float]]) -> float:
    return sum(table[order[k]][order[k + 1]] for k in range(len(order) - 1))


def _nearest_neighbour(
    table: Sequence[Sequence[float]],
    start: int,
    fixed_end: Optional[int],
) -> list[int]:
    node_count = len(table)
    order = [start]
    visited = {start}
    if fixed_end is not None:
        visited.add(fixed_end)
    current = start
    while len(visited) < node_count:
        best_node = -1
        best_cost = math.inf
        # Strict comparison keeps the lowest input index on ties.
        for candidate in range(node_count):
            if candidate in visited:
                continue
            candidate_cost = table[current][candidate]
            if candidate_cost < best_cost:
                best_cost = candidate_cost
                best_node = candidate
        order.append(best_node)
        visited.add(best_node)
        current = best_node
    if fixed_end is not None:
        order.append(fixed_end)
    return order


def _first_improving_move(
    order: Sequence[int],
    table: Sequence[Sequence[float]],
    last_movable: int,
) -> Optional[tuple[int, int]]:
    """Find the first (i, j) whose reversal of positions i+1..j shortens the path."""
    length = len(order)
    for i in range(0, last_movable - 1):
        for j in range(i + 2, last_movable + 1):
            current = order[i : j + 2]
            candidate = [order[i], *order[j:i:-1]]
            if j + 1 < length:
                candidate.append(order[j + 1])
            current_cost = path_cost(current, table)
            candidate_cost = path_cost(candidate, table)
            if candidate_cost < current_cost:
                return i, j
    return None


def _two_opt(
    order: list[int],
    table: Sequence[Sequence[float]],
    pinned_end: bool,
    max_scans: int,
) -> tuple[int, int]:
    # Position 0 never moves; a pinned end keeps the last position too.
    last_movable = len(order) - (2 if pinned_end else 1)
    scans = 0
    improvements = 0
    while scans < max_scans:
        scans += 1
        move = _first_improving_move(order, table, last_movable)
        if move is None:
            break
        i, j = move
        order[i + 1 : j + 1] = order[i + 1 : j + 1][::-1]
        improvements += 1
    return scans, improvements


def _known_cost(order: Sequence[int], table: Sequence[Sequence[float]], unreachable: set[tuple[int, int]]) -> tuple[float, int]:
    total = 0.0
    unreachable_legs = 0
    for k in range(len(order) - 1):
        leg = (order[k], order[k + 1])
        if leg in unreachable:
            unreachable_legs += 1
        else:
            total += table[leg[0]][leg[1]]
    return total, unreachable_legs


def solve_tour(
    node_count: int,
    cost: CostFunction,
    *,
    fixed_end: Optional[int] = None,
    start: Optional[int] = None,
    max_scans: Optional[int] = None,
) -> TourResult:
    """Order ``node_count`` nodes into a short open path.

    Args:
        node_count: Number of nodes, addressed as ``0..node_count-1``.
        cost: Leg cost between two distinct nodes, or ``UNREACHABLE``.
        fixed_end: Node that must be visited last.
        start: Node to begin construction from. Defaults to node 0, or node 1
            when node 0 is the fixed end.
        max_scans: Upper bound on 2-opt scans. Defaults to
            ``settings.two_opt_scan_factor * node_count``.

    Returns:
        TourResult with the visiting order, the summed cost of reachable legs
        and the number of unreachable legs the order could not avoid.
    """
    if node_count < 0:
        raise InvalidInputError("Node count cannot be negative.")
    for label, node in (("fixed_end", fixed_end), ("start", start)):
        if node is not None and not 0 <= node < node_count:
            raise InvalidInputError(f"{label} {node} is outside 0..{node_count - 1}.")
    if node_count > 1 and start is not None and start == fixed_end:
        raise InvalidInputError("The start node cannot also be the fixed end node.")

    if node_count == 0:
        return TourResult(order=[], total_cost=0.0)
    if node_count == 1:
        return TourResult(order=[0], total_cost=0.0)

    table, unreachable = build_cost_table(node_count, cost)

    if node_count == 2:
        if fixed_end is not None:
            order = [1 - fixed_end, fixed_end]
        elif start is not None:
            order = [start, 1 - start]
        else:
            order = [0, 1]
        total, unreachable_legs = _known_cost(order, table, unreachable)
        return TourResult(order=order, total_cost=total, unreachable_legs=unreachable_legs)

    if start is None:
        start = 1 if fixed_end == 0 else 0

    order = _nearest_neighbour(table, start, fixed_end)
    constructed_cost = path_cost(order, table)

    scan_limit = max_scans if max_scans is not None else settings.two_opt_scan_factor * node_count
    scans, improvements = _two_opt(order, table, fixed_end is not None, scan_limit)
    logger.debug(
        f"Tour over {node_count} nodes: construction cost {constructed_cost:.3f}, "
        f"after 2-opt {path_cost(order, table):.3f} ({improvements} moves in {scans} scans)"
    )

    total, unreachable_legs = _known_cost(order, table, unreachable)
    return TourResult(
        order=order,
        total_cost=total,
        scans=scans,
        improvements=improvements,
        unreachable_legs=unreachable_legs,
    )

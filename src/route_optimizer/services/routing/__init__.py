"""Hierarchical route optimization."""

from .errors import InvalidInputError, MalformedCostError
from .hierarchy import solve_hierarchical_route
from .solver import solve_tour

__all__ = ["InvalidInputError", "MalformedCostError", "solve_hierarchical_route", "solve_tour"]

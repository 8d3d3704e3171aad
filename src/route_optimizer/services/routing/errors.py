"""Errors raised by the route optimizer.

Both subclass ``ValueError`` so API handlers can map them to HTTP 400 the same
way they treat any other rejected payload.
"""

from __future__ import annotations


class InvalidInputError(ValueError):
    """The location list cannot be grouped or ordered as given."""


class MalformedCostError(ValueError):
    """A cost function or matrix produced a negative or non-numeric value."""

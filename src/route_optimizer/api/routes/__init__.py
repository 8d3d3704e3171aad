"""Route group exports."""

from . import distance_matrix, health, routes

__all__ = ["routes", "health", "distance_matrix"]

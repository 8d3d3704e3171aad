"""Serializers for optimized routes."""

from __future__ import annotations

import csv
import io

from ..routing.models import OptimizedRoute


def optimized_route_to_json(route: OptimizedRoute) -> dict:
    return {
        "cost_source": route.cost_source,
        "total_cost": route.total_cost,
        "metadata": route.metadata,
        "locations": [
            {
                "sequence": sequence,
                "id": location.id,
                "name": location.name,
                "lat": location.lat,
                "lng": location.lng,
                "parent_id": location.parent_id,
                "kind": location.kind.value,
            }
            for sequence, location in enumerate(route.locations, start=1)
        ],
    }


def optimized_route_to_csv(route: OptimizedRoute) -> str:
    buffer = io.StringIO()
    fieldnames = ["sequence", "id", "name", "lat", "lng", "parent_id", "kind"]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for row in optimized_route_to_json(route)["locations"]:
        writer.writerow({**row, "parent_id": row["parent_id"] or ""})
    return buffer.getvalue()

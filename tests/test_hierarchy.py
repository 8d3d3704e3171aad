import pytest

from route_optimizer.models.domain import UNREACHABLE, Location, LocationKind
from route_optimizer.services.routing.errors import InvalidInputError
from route_optimizer.services.routing.hierarchy import (
    COST_SOURCE_HAVERSINE,
    COST_SOURCE_MATRIX,
    solve_hierarchical_route,
)


def _place(pid: str, lat: float, lng: float) -> Location:
    return Location(id=pid, name=f"Place {pid}", lat=lat, lng=lng)


def _poi(pid: str, parent: str, lat: float, lng: float) -> Location:
    return Location(id=pid, name=f"POI {pid}", lat=lat, lng=lng, parent_id=parent)


def _ids(route) -> list[str]:
    return [location.id for location in route.locations]


def _places_in_order(route) -> list[str]:
    return [location.id for location in route.locations if location.kind is LocationKind.PLACE]


def test_empty_input_returns_empty_route():
    route = solve_hierarchical_route([])
    assert route.locations == []


def test_single_location_is_returned_as_is():
    only = _place("A", 10.0, 10.0)
    route = solve_hierarchical_route([only])
    assert route.locations == [only]


def test_linear_chain_is_solved_in_increasing_order():
    locations = [_place(f"P{i}", 0.0, float(i)) for i in range(5)]

    route = solve_hierarchical_route(locations)

    assert _ids(route) == ["P0", "P1", "P2", "P3", "P4"]
    assert route.cost_source == COST_SOURCE_HAVERSINE
    assert route.total_cost == pytest.approx(4 * 111.195, abs=0.1)


def test_linear_chain_entered_from_the_far_end_is_decreasing():
    locations = [_place(f"P{i}", 0.0, float(i)) for i in reversed(range(5))]

    route = solve_hierarchical_route(locations)

    assert _ids(route) == ["P4", "P3", "P2", "P1", "P0"]


def test_points_of_interest_follow_their_place():
    locations = [
        _place("p1", 0.0, 0.0),
        _place("p2", 0.1, 0.1),
        _poi("poi1", "p1", 0.0, 0.0),
        _poi("poi2", "p1", 0.0, 0.0),
        _poi("poi3", "p2", 0.1, 0.1),
    ]

    route = solve_hierarchical_route(locations)

    assert _ids(route) == ["p1", "poi1", "poi2", "p2", "poi3"]
    assert route.metadata["place_count"] == 2
    assert route.metadata["poi_count"] == 3


def test_points_of_interest_leave_from_the_closest_one():
    locations = [
        _place("P", 0.0, 0.0),
        _poi("far", "P", 0.0, 0.05),
        _poi("near", "P", 0.0, 0.01),
        _poi("mid", "P", 0.0, 0.03),
    ]

    route = solve_hierarchical_route(locations)

    assert _ids(route) == ["P", "near", "mid", "far"]


def test_grouping_cohesion_with_interleaved_input():
    locations = [
        _poi("c1", "C", 0.001, 0.2),
        _place("A", 0.0, 0.0),
        _poi("a1", "A", 0.001, 0.0),
        _place("B", 0.0, 0.1),
        _poi("b1", "B", 0.002, 0.1),
        _poi("a2", "A", 0.002, 0.0),
        _place("C", 0.0, 0.2),
        _poi("b2", "B", 0.001, 0.1),
    ]

    route = solve_hierarchical_route(locations)
    ordered = route.locations

    assert sorted(_ids(route)) == sorted(location.id for location in locations)
    current_place = None
    for location in ordered:
        if location.kind is LocationKind.PLACE:
            current_place = location.id
        else:
            assert location.parent_id == current_place


def test_orphan_point_of_interest_is_not_dropped():
    locations = [
        _place("A", 0.0, 0.0),
        _poi("orphan", "ghost", 0.0, 0.5),
        _place("B", 0.0, 1.0),
    ]

    route = solve_hierarchical_route(locations)

    assert sorted(_ids(route)) == ["A", "B", "orphan"]
    assert _ids(route) == ["A", "orphan", "B"]
    assert route.metadata["orphan_count"] == 1


def test_matrix_costs_override_geography():
    locations = [_place("A", 0.0, 0.0), _place("B", 0.0, 1.0), _place("C", 0.0, 2.0)]
    matrix = [
        [0, 100, 10],
        [100, 0, 100],
        [100, 10, 0],
    ]

    with_matrix = solve_hierarchical_route(locations, matrix)
    without_matrix = solve_hierarchical_route(locations)

    assert _ids(with_matrix) == ["A", "C", "B"]
    assert with_matrix.cost_source == COST_SOURCE_MATRIX
    assert with_matrix.total_cost == pytest.approx(20.0)
    assert _ids(without_matrix) == ["A", "B", "C"]


def test_sentinel_and_null_entries_are_unreachable():
    locations = [_place("A", 0.0, 0.0), _place("B", 0.0, 1.0), _place("C", 0.0, 2.0)]
    matrix = [
        [0, 999999999, 50],
        [30, 0, 40],
        [None, 20, 0],
    ]

    route = solve_hierarchical_route(locations, matrix)

    assert _ids(route) == ["A", "C", "B"]
    assert route.metadata["unreachable_legs"] == 0


def test_explicit_unreachable_marker_is_accepted():
    locations = [_place("A", 0.0, 0.0), _place("B", 0.0, 1.0), _place("C", 0.0, 2.0)]
    matrix = [
        [0, UNREACHABLE, 50],
        [30, 0, 40],
        [UNREACHABLE, 20, 0],
    ]

    route = solve_hierarchical_route(locations, matrix)

    assert _ids(route) == ["A", "C", "B"]


def test_orphan_legs_are_estimated_when_matrix_is_present():
    locations = [
        _place("A", 0.0, 0.0),
        _poi("orphan", "ghost", 0.0, 0.5),
        _place("B", 0.0, 1.0),
    ]
    matrix = [[0, 100], [100, 0]]

    route = solve_hierarchical_route(locations, matrix)

    assert route.cost_source == COST_SOURCE_MATRIX
    assert _ids(route) == ["A", "B", "orphan"]


def test_mis_sized_matrix_falls_back_to_haversine():
    locations = [_place("A", 0.0, 0.0), _place("B", 0.0, 1.0), _place("C", 0.0, 2.0)]

    route = solve_hierarchical_route(locations, [[0, 1], [1, 0]])

    assert route.cost_source == COST_SOURCE_HAVERSINE
    assert _ids(route) == ["A", "B", "C"]


def test_endpoint_is_pinned_last_among_places():
    locations = [
        _place("A", 0.0, 0.0),
        _place("B", 0.0, 1.0),
        _poi("b1", "B", 0.001, 1.0),
        _place("C", 0.0, 2.0),
    ]

    route = solve_hierarchical_route(locations, endpoint_id="B")

    assert _places_in_order(route)[-1] == "B"
    assert _ids(route) == ["A", "C", "B", "b1"]
    assert route.metadata["endpoint_id"] == "B"


def test_endpoint_given_as_point_of_interest_pins_its_place():
    locations = [
        _place("A", 0.0, 0.0),
        _place("B", 0.0, 1.0),
        _poi("b1", "B", 0.001, 1.0),
        _place("C", 0.0, 2.0),
    ]

    route = solve_hierarchical_route(locations, endpoint_id="b1")

    assert _places_in_order(route)[-1] == "B"


def test_unknown_endpoint_is_rejected():
    locations = [_place("A", 0.0, 0.0), _place("B", 0.0, 1.0)]
    with pytest.raises(InvalidInputError):
        solve_hierarchical_route(locations, endpoint_id="nope")


def test_route_is_deterministic():
    locations = [
        _place("A", 48.8584, 2.2945),
        _place("B", 48.8606, 2.3376),
        _poi("b1", "B", 48.8611, 2.3364),
        _place("C", 48.8530, 2.3499),
        _place("D", 48.8867, 2.3431),
        _poi("d1", "D", 48.8860, 2.3430),
        _poi("d2", "D", 48.8850, 2.3410),
    ]

    first = solve_hierarchical_route(locations)
    second = solve_hierarchical_route(locations)

    assert _ids(first) == _ids(second)
    assert len(first.locations) == len(locations)

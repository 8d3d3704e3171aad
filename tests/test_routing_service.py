import pytest

from route_optimizer.models.domain import UNREACHABLE
from route_optimizer.schemas.routing import OptimizeRouteRequest
from route_optimizer.services.routing import service as routing_service
from route_optimizer.services.routing import travel_times
from route_optimizer.services.routing.errors import InvalidInputError


def _request(**overrides) -> OptimizeRouteRequest:
    body = {
        "locations": [
            {"id": "hotel", "name": "Hotel", "lat": 0.0, "lng": 0.0},
            {"id": "museum", "name": "Museum", "lat": 0.0, "lng": 1.0},
            {"id": "wing", "name": "East Wing", "lat": 0.001, "lng": 1.0, "parentId": "museum"},
            {"id": "park", "name": "Park", "lat": 0.0, "lng": 2.0},
        ],
    }
    body.update(overrides)
    return OptimizeRouteRequest.model_validate(body)


class DummyTravelTimes:
    def __init__(self, matrix=None):
        self.matrix = matrix
        self.requests = []

    def place_matrix(self, places, mode=None):
        self.requests.append(([place.id for place in places], mode))
        return self.matrix


def test_optimize_route_uses_provider_matrix():
    dummy = DummyTravelTimes(
        matrix=[
            [0, 500, 100],
            [500, 0, 500],
            [500, 100, 0],
        ]
    )

    response = routing_service.optimize_route(_request(mode="walking"), travel_time_service=dummy)

    assert [location.id for location in response.optimized_path] == ["hotel", "park", "museum", "wing"]
    assert dummy.requests == [(["hotel", "museum", "park"], "walking")]
    assert response.metadata["matrix_origin"] == "provider"
    assert response.metadata["cost_source"] == "travel_matrix"
    assert response.metadata["mode"] == "walking"


def test_optimize_route_falls_back_to_haversine_when_provider_fails():
    dummy = DummyTravelTimes(matrix=None)

    response = routing_service.optimize_route(_request(), travel_time_service=dummy)

    assert [location.id for location in response.optimized_path] == ["hotel", "museum", "wing", "park"]
    assert response.metadata["matrix_origin"] == "none"
    assert response.metadata["cost_source"] == "haversine"


def test_request_matrix_skips_provider():
    dummy = DummyTravelTimes(matrix=[[0, 1, 1], [1, 0, 1], [1, 1, 0]])
    matrix = [
        [0, 999999999, 10],
        [10, 0, 999999999],
        [999999999, 10, 0],
    ]

    response = routing_service.optimize_route(_request(costMatrix=matrix), travel_time_service=dummy)

    assert dummy.requests == []
    assert [location.id for location in response.optimized_path] == ["hotel", "park", "museum", "wing"]
    assert response.metadata["matrix_origin"] == "request"


def test_explicit_endpoint_id_pins_its_place():
    dummy = DummyTravelTimes(matrix=None)
    request = _request(
        locations=[
            {"id": "hotel", "name": "Hotel", "lat": 0.0, "lng": 0.0},
            {"id": "airport", "name": "Airport", "lat": 0.0, "lng": 0.5},
            {"id": "museum", "name": "Museum", "lat": 0.0, "lng": 1.0},
            {"id": "lounge", "name": "Lounge", "lat": 0.0, "lng": 0.5, "parentId": "airport"},
        ],
        lockEndpoint=False,
        endpointId="airport",
    )

    response = routing_service.optimize_route(request, travel_time_service=dummy)

    assert [location.id for location in response.optimized_path] == ["hotel", "museum", "airport", "lounge"]
    assert response.metadata["endpoint_locked"] is True


@pytest.mark.parametrize(
    "overrides",
    [
        {"lockEndpoint": True},
        {"config": {"endPoint": {"type": "specific_location"}}},
    ],
)
def test_endpoint_flag_resolves_to_last_place(overrides):
    dummy = DummyTravelTimes(matrix=None)
    request = _request(
        locations=[
            {"id": "hotel", "name": "Hotel", "lat": 0.0, "lng": 0.0},
            {"id": "museum", "name": "Museum", "lat": 0.0, "lng": 1.0},
            {"id": "station", "name": "Station", "lat": 0.0, "lng": 0.5},
        ],
        **overrides,
    )

    response = routing_service.optimize_route(request, travel_time_service=dummy)

    assert [location.id for location in response.optimized_path] == ["hotel", "museum", "station"]


def test_no_endpoint_lock_by_default():
    request = _request()
    assert routing_service.resolve_endpoint_id(request, []) is None


def test_fewer_than_two_locations_is_rejected():
    request = _request(locations=[{"id": "solo", "name": "Solo", "lat": 0.0, "lng": 0.0}])
    with pytest.raises(InvalidInputError):
        routing_service.optimize_route(request, travel_time_service=DummyTravelTimes())


def test_module_level_service_is_used_by_default(monkeypatch):
    dummy = DummyTravelTimes(matrix=None)
    monkeypatch.setattr(travel_times, "travel_time_service", dummy)

    routing_service.optimize_route(_request())

    assert len(dummy.requests) == 1


def test_export_route_csv_lists_every_stop():
    content = routing_service.export_route_csv(_request(), travel_time_service=DummyTravelTimes())

    lines = content.strip().splitlines()
    assert lines[0] == "sequence,id,name,lat,lng,parent_id,kind"
    assert len(lines) == 5
    assert lines[3].startswith("3,wing,East Wing,")
    assert lines[3].endswith(",museum,point_of_interest")


def test_unreachable_marker_from_provider_is_handled():
    dummy = DummyTravelTimes(
        matrix=[
            [0, UNREACHABLE, 50],
            [UNREACHABLE, 0, UNREACHABLE],
            [50, 10, 0],
        ]
    )

    response = routing_service.optimize_route(_request(), travel_time_service=dummy)

    assert [location.id for location in response.optimized_path] == ["hotel", "park", "museum", "wing"]
    assert response.metadata["unreachable_legs"] == 0

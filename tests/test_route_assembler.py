import logging

import pytest

from src.pickup_routing.errors import ClusteringError, EmptyInputError, InvalidCoordinateError
from src.pickup_routing.models.domain import PickupRequest, Point
from src.pickup_routing.services.routing.assembler import RouteAssembler, assemble_route, leg_time_minutes
from src.pickup_routing.services.routing.directions import DirectionsProvider, GoogleDirectionsAdapter
from src.pickup_routing.services.routing.models import (
    POLYLINE_SOURCE_DIRECTIONS,
    POLYLINE_SOURCE_STRAIGHT_LINE,
    PathResult,
)
from src.pickup_routing.services.geospatial import distance_km

SCHOOL = Point(20.6597, -103.3496)


def _pickup(cid: str, lat: float, lon: float) -> PickupRequest:
    return PickupRequest(
        confirmation_id=cid,
        child_id=f"H{cid}",
        child_name=f"Child {cid}",
        address=f"Calle {cid}",
        reference=f"Casa azul {cid}",
        location=Point(lat, lon),
    )


def _scenario_pickups() -> list[PickupRequest]:
    return [
        _pickup("C1", 20.4186, -103.3929),
        _pickup("C2", 20.4161, -103.3911),
        _pickup("C3", 20.4133, -103.3892),
    ]


class RecordingDirections(DirectionsProvider):
    def __init__(self) -> None:
        self.calls = []

    def fetch_polyline(self, origin, destination, waypoints):
        self.calls.append((origin, destination, list(waypoints)))
        return PathResult(polyline="recorded", bounds=None, source=POLYLINE_SOURCE_DIRECTIONS)

    def regenerate_from_current_position(self, current_position, remaining_stops, destination):
        return "recorded"


def test_leg_time_formula():
    assert leg_time_minutes(15) == 32
    assert leg_time_minutes(0) == 2
    assert leg_time_minutes(30) == 62


def test_assemble_end_to_end_scenario():
    result = assemble_route(SCHOOL, _scenario_pickups())

    assert result.num_clusters == 1
    assert result.cluster_order == (0,)
    assert [stop.confirmation_id for stop in result.stops] == ["C1", "C2", "C3"]
    assert [stop.sequence for stop in result.stops] == [1, 2, 3]
    assert all(stop.cluster_index == 0 for stop in result.stops)

    cumulative = 0.0
    previous_cumulative = 0.0
    for stop in result.stops:
        cumulative += stop.distance_km
        assert cumulative >= previous_cumulative
        previous_cumulative = cumulative
    assert result.total_distance_km == pytest.approx(cumulative)

    assert result.polyline
    assert result.polyline_source == POLYLINE_SOURCE_STRAIGHT_LINE
    assert result.bounds.southwest == Point(20.4133, -103.3929)
    assert result.bounds.northeast == SCHOOL


def test_assemble_leg_metrics():
    pickups = _scenario_pickups()
    result = assemble_route(SCHOOL, pickups)

    first = result.stops[0]
    expected_first_leg = distance_km(SCHOOL, pickups[0].location)
    assert first.distance_km == pytest.approx(expected_first_leg)
    assert first.time_min == pytest.approx((expected_first_leg / 30) * 60 + 2)

    second = result.stops[1]
    assert second.distance_km == pytest.approx(distance_km(pickups[0].location, pickups[1].location))
    assert result.total_time_min == pytest.approx(sum(stop.time_min for stop in result.stops))


def test_assemble_copies_pickup_identifiers():
    result = assemble_route(SCHOOL, _scenario_pickups())

    stop = result.stops[0]
    assert stop.child_id == "HC1"
    assert stop.child_name == "Child C1"
    assert stop.address == "Calle C1"
    assert stop.reference == "Casa azul C1"
    assert stop.location == Point(20.4186, -103.3929)


def test_assemble_many_pickups_uses_all_clusters_and_global_sequence():
    pickups = []
    for cluster_id, (base_lat, base_lng) in enumerate(
        [(20.70, -103.30), (20.50, -103.50), (20.60, -103.20), (20.40, -103.35), (20.80, -103.45)]
    ):
        for i in range(6):
            pickups.append(_pickup(f"K{cluster_id}-{i}", base_lat + i * 0.002, base_lng + i * 0.001))
    directions = RecordingDirections()

    result = RouteAssembler(directions, random_state=0).assemble(SCHOOL, pickups)

    assert result.num_clusters == 5
    assert sorted(result.cluster_order) == [0, 1, 2, 3, 4]
    assert [stop.sequence for stop in result.stops] == list(range(1, 31))
    assert sorted(stop.confirmation_id for stop in result.stops) == sorted(p.confirmation_id for p in pickups)

    # Stops of one cluster are visited consecutively, in cluster order.
    visited_clusters = []
    for stop in result.stops:
        if not visited_clusters or visited_clusters[-1] != stop.cluster_index:
            visited_clusters.append(stop.cluster_index)
    assert visited_clusters == list(result.cluster_order)

    origin, destination, waypoints = directions.calls[0]
    assert origin == SCHOOL
    assert destination == result.stops[-1].location
    assert waypoints == [stop.location for stop in result.stops[:-1]]
    assert result.polyline == "recorded"
    assert result.polyline_source == POLYLINE_SOURCE_DIRECTIONS


def test_assemble_with_unreachable_provider_still_returns_polyline():
    adapter = GoogleDirectionsAdapter(api_key="")

    result = RouteAssembler(adapter).assemble(SCHOOL, _scenario_pickups())

    assert result.polyline
    assert result.polyline_source == POLYLINE_SOURCE_STRAIGHT_LINE


def test_assemble_single_pickup():
    result = assemble_route(SCHOOL, [_pickup("ONLY", 20.5, -103.4)])

    assert len(result.stops) == 1
    assert result.cluster_order == (0,)
    assert result.polyline


def test_assemble_rejects_empty_pickups():
    with pytest.raises(EmptyInputError) as excinfo:
        assemble_route(SCHOOL, [])

    assert excinfo.value.to_dict()["kind"] == "empty_input"


def test_assemble_rejects_out_of_range_pickup():
    with pytest.raises(InvalidCoordinateError):
        assemble_route(SCHOOL, [_pickup("BAD", 95.0, -103.4)])


def test_assemble_propagates_clustering_error():
    pickups = [*_scenario_pickups(), _pickup("NAN", float("nan"), -103.4)]

    with pytest.raises(ClusteringError):
        assemble_route(SCHOOL, pickups)


def test_assemble_rejects_non_finite_school():
    with pytest.raises(InvalidCoordinateError) as excinfo:
        assemble_route(Point(float("nan"), -103.3), _scenario_pickups())

    assert excinfo.value.to_dict()["kind"] == "invalid_coordinate"
    assert "School" in excinfo.value.to_dict()["message"]


def test_assemble_rejects_out_of_range_school():
    with pytest.raises(InvalidCoordinateError):
        assemble_route(Point(20.6597, -190.0), _scenario_pickups())


def test_assemble_logs_through_injected_logger(caplog):
    route_logger = logging.getLogger("tests.route_assembler")

    with caplog.at_level(logging.INFO, logger="tests.route_assembler"):
        RouteAssembler(logger=route_logger).assemble(SCHOOL, _scenario_pickups())

    messages = [record.getMessage() for record in caplog.records if record.name == "tests.route_assembler"]
    assert any("Using 1 clusters for 3 pickups" in message for message in messages)
    assert any(message.startswith("Route optimized") for message in messages)

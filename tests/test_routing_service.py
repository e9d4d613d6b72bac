import pytest
from pydantic import ValidationError

from src.pickup_routing.errors import EmptyInputError
from src.pickup_routing.schemas.routing import PolylineRegenerationRequest, RouteOptimizationRequest
from src.pickup_routing.services.routing import service as routing_service
from src.pickup_routing.services.routing.directions import StraightLineDirections
from src.pickup_routing.models.domain import Point
from src.pickup_routing.services.routing.polyline import decode_polyline, encode_polyline


def _pickup(cid: str, lat: float, lng: float, **extra) -> dict:
    return {
        "confirmation_id": cid,
        "child_id": f"H{cid}",
        "address": f"Calle {cid}",
        "location": {"lat": lat, "lng": lng},
        **extra,
    }


@pytest.fixture(autouse=True)
def straight_line_provider(monkeypatch):
    monkeypatch.setattr(routing_service, "get_directions_provider", lambda: StraightLineDirections())


def test_optimize_route_returns_response():
    request = RouteOptimizationRequest(
        school={"lat": 20.6597, "lng": -103.3496},
        pickups=[
            _pickup("C1", 20.4186, -103.3929, child_name="Ana", reference="Portón negro"),
            _pickup("C2", 20.4161, -103.3911),
            _pickup("C3", 20.4133, -103.3892),
        ],
    )

    response = routing_service.optimize_route(request)

    assert response.num_clusters == 1
    assert response.cluster_order == [0]
    assert [stop.confirmation_id for stop in response.stops] == ["C1", "C2", "C3"]
    first = response.stops[0]
    assert first.child_name == "Ana"
    assert first.reference == "Portón negro"
    assert response.stops[1].child_name == "Sin nombre"
    assert response.stops[1].reference == ""
    assert first.distance_km == round(first.distance_km, 2)
    assert response.polyline_source == "straight_line"

    decoded = decode_polyline(response.polyline)
    assert len(decoded) == 4
    assert decoded[0].lat == pytest.approx(20.6597, abs=1e-5)

    assert response.bounds.northeast.lat == 20.6597
    assert response.summary.total_stops == 3
    assert response.summary.start_point.lat == 20.6597
    assert response.summary.estimated_distance.endswith(" km")
    assert response.summary.estimated_time.endswith(" minutos")


def test_optimize_route_without_pickups_raises_structured_error():
    request = RouteOptimizationRequest(school={"lat": 20.6597, "lng": -103.3496}, pickups=[])

    with pytest.raises(EmptyInputError) as excinfo:
        routing_service.optimize_route(request)

    assert excinfo.value.to_dict() == {
        "kind": "empty_input",
        "message": "No confirmed pickups to optimize.",
    }


def test_request_rejects_invalid_coordinates():
    with pytest.raises(ValidationError):
        RouteOptimizationRequest(
            school={"lat": 120.0, "lng": -103.3496},
            pickups=[_pickup("C1", 20.4186, -103.3929)],
        )


def test_regenerate_route_polyline():
    request = PolylineRegenerationRequest(
        current_position={"lat": 20.5, "lng": -103.36},
        remaining_stops=[{"lat": 20.4161, "lng": -103.3911}],
        destination={"lat": 20.6597, "lng": -103.3496},
    )

    polyline = routing_service.regenerate_route_polyline(request)

    assert polyline == encode_polyline(
        [Point(20.5, -103.36), Point(20.4161, -103.3911), Point(20.6597, -103.3496)]
    )

"""Routing orchestration service."""

from __future__ import annotations

import logging
from typing import Sequence

from ...errors import RouteOptimizationError
from ...models.domain import DEFAULT_CHILD_NAME, PickupRequest, Point
from ...schemas.routing import (
    PickupRequestModel,
    PointModel,
    PolylineRegenerationRequest,
    RouteOptimizationRequest,
    RouteResponse,
)
from ..outputs.routing_formatter import route_result_to_json
from .assembler import RouteAssembler
from .directions import get_directions_provider

logger = logging.getLogger(__name__)


def _to_point(model: PointModel) -> Point:
    return Point(model.lat, model.lng)


def _to_pickups(models: Sequence[PickupRequestModel]) -> list[PickupRequest]:
    return [
        PickupRequest(
            confirmation_id=model.confirmation_id,
            child_id=model.child_id,
            child_name=model.child_name or DEFAULT_CHILD_NAME,
            address=model.address,
            reference=model.reference or "",
            location=_to_point(model.location),
        )
        for model in models
    ]


def optimize_route(payload: RouteOptimizationRequest) -> RouteResponse:
    """Build the optimized pickup route for a trip.

    Raises the RouteOptimizationError subclass describing the failure; the
    caller reports ``exc.to_dict()`` and keeps the trip in its previous state.
    """
    school = _to_point(payload.school)
    pickups = _to_pickups(payload.pickups)

    assembler = RouteAssembler(get_directions_provider(), logger=logger)
    try:
        result = assembler.assemble(school, pickups)
    except RouteOptimizationError as exc:
        logger.error(f"Route optimization failed ({exc.kind}): {exc.message}")
        raise

    return RouteResponse.model_validate(route_result_to_json(result))


def regenerate_route_polyline(payload: PolylineRegenerationRequest) -> str:
    """Polyline from the vehicle's current position through pending stops back to the destination."""
    provider = get_directions_provider()
    return provider.regenerate_from_current_position(
        _to_point(payload.current_position),
        [_to_point(stop) for stop in payload.remaining_stops],
        _to_point(payload.destination),
    )

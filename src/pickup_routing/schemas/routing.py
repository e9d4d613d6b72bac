"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class PointModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class PickupRequestModel(BaseModel):
    confirmation_id: str
    child_id: str
    child_name: Optional[str] = Field(default=None, description="Display name; defaults to 'Sin nombre'.")
    address: str = Field(..., description="Free-text pickup address.")
    reference: Optional[str] = Field(default=None, description="Referral note to help the driver find the address.")
    location: PointModel


class RouteOptimizationRequest(BaseModel):
    school: PointModel = Field(..., description="Resolved school location; the route starts here.")
    pickups: List[PickupRequestModel] = Field(..., description="Confirmed pickups to visit.")


class PolylineRegenerationRequest(BaseModel):
    """Recompute the path mid-route from the vehicle's current position."""

    current_position: PointModel
    remaining_stops: List[PointModel] = Field(default_factory=list)
    destination: PointModel


class StopModel(BaseModel):
    sequence: int
    confirmation_id: str
    child_id: str
    child_name: str
    address: str
    reference: str
    lat: float
    lng: float
    cluster_index: int
    distance_km: float
    time_min: float


class BoundsModel(BaseModel):
    southwest: PointModel
    northeast: PointModel


class RouteSummaryModel(BaseModel):
    start_point: PointModel
    total_stops: int
    estimated_distance: str
    estimated_time: str


class RouteResponse(BaseModel):
    stops: List[StopModel]
    total_distance_km: float
    total_time_min: float
    num_clusters: int
    cluster_order: List[int]
    polyline: str
    bounds: Optional[BoundsModel]
    polyline_source: str
    summary: RouteSummaryModel


class RouteErrorModel(BaseModel):
    kind: str
    message: str

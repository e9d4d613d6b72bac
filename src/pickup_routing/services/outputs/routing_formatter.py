"""Serializers for routing outputs."""

from __future__ import annotations

import csv
import io

from ..routing.models import RouteResult, Stop


def _stop_to_json(stop: Stop) -> dict:
    return {
        "sequence": stop.sequence,
        "confirmation_id": stop.confirmation_id,
        "child_id": stop.child_id,
        "child_name": stop.child_name,
        "address": stop.address,
        "reference": stop.reference,
        "lat": stop.location.lat,
        "lng": stop.location.lng,
        "cluster_index": stop.cluster_index,
        "distance_km": round(stop.distance_km, 2),
        "time_min": round(stop.time_min),
    }


def build_route_summary(result: RouteResult) -> dict:
    return {
        "start_point": result.origin.as_dict(),
        "total_stops": len(result.stops),
        "estimated_distance": f"{round(result.total_distance_km, 2)} km",
        "estimated_time": f"{round(result.total_time_min)} minutos",
    }


def route_result_to_json(result: RouteResult) -> dict:
    return {
        "stops": [_stop_to_json(stop) for stop in result.stops],
        "total_distance_km": round(result.total_distance_km, 2),
        "total_time_min": round(result.total_time_min),
        "num_clusters": result.num_clusters,
        "cluster_order": list(result.cluster_order),
        "polyline": result.polyline,
        "bounds": result.bounds.as_dict() if result.bounds else None,
        "polyline_source": result.polyline_source,
        "summary": build_route_summary(result),
    }


def route_result_to_csv(result: RouteResult) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "confirmation_id",
        "child_id",
        "child_name",
        "address",
        "reference",
        "lat",
        "lng",
        "cluster_index",
        "distance_km",
        "time_min",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for stop in result.stops:
        writer.writerow(_stop_to_json(stop))
    return buffer.getvalue()

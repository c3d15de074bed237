"""Serializers for route optimization outputs."""

from __future__ import annotations

import csv
import io

from ..geospatial import distance_km
from ..optimization.models import OptimizationResult


def optimization_result_to_json(result: OptimizationResult, metadata: dict | None = None) -> dict:
    return {
        "success": result.success,
        "objective": result.objective,
        "metadata": metadata or {},
        "total_distance_km": result.total_distance_km,
        "estimated_travel_time_minutes": result.estimated_travel_time_minutes,
        "estimated_cost": result.estimated_cost,
        "coverage_score": result.coverage_score,
        "constraint_violations": result.constraint_violations,
        "stops": [
            {"sequence": sequence, "latitude": point.latitude, "longitude": point.longitude}
            for sequence, point in enumerate(result.optimized_stops, start=1)
        ],
    }


def optimization_result_to_csv(result: OptimizationResult) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "latitude",
        "longitude",
        "distance_from_prev_km",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    previous = None
    for sequence, point in enumerate(result.optimized_stops, start=1):
        writer.writerow(
            {
                "sequence": sequence,
                "latitude": point.latitude,
                "longitude": point.longitude,
                "distance_from_prev_km": distance_km(previous, point) if previous else 0.0,
            }
        )
        previous = point
    return buffer.getvalue()

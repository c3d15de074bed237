"""Route optimization orchestration service."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Sequence

import numpy as np
from shapely.geometry import Point, Polygon
from sklearn.cluster import KMeans

from ...models.domain import GeoPoint, RoutePath, Stop
from ...persistence import trips as trip_store
from ...persistence.filesystem import FileStorage
from ...schemas.optimization import (
    ProposedStopModel,
    RouteAnalysisResponse,
    RouteOptimizationRequest,
    RouteOptimizationResponse,
    StopLocationResponse,
)
from ...schemas.trips import GeoPointModel
from ..network import get_network
from ..network.store import TransitNetworkStore
from ..outputs.optimization_formatter import optimization_result_to_csv, optimization_result_to_json
from .metrics import (
    MetricsConfig,
    coverage_score,
    efficiency_score,
    estimate_travel_time_minutes,
    operational_cost,
    path_distance_km,
)
from .models import OptimizationResult, RouteAnalysis, StopSequenceRequest
from .sequence_solver import order_stops

ALTERNATIVE_GOALS = ("minimize_time", "minimize_distance", "maximize_coverage")

SPLIT_ROUTE_DISTANCE_KM = 40.0
MIN_STOPS_PER_ROUTE = 5
MAX_STOPS_PER_ROUTE = 20

SPLIT_ROUTE_SUGGESTION = "Consider splitting this route into two shorter routes for better efficiency"
ADD_STOPS_SUGGESTION = "Route may benefit from additional stops to improve coverage"
REDUCE_STOPS_SUGGESTION = "Consider reducing number of stops to improve travel time"

CANDIDATE_GRID_SIZE = 20


def generate_path(stops: Sequence[GeoPoint]) -> list[GeoPoint]:
    if len(stops) < 2:
        raise ValueError("At least 2 stops required to generate a path")
    return list(stops)


def _sequence_points(request: StopSequenceRequest, cancel_event: threading.Event | None) -> list[GeoPoint]:
    points = list(request.stops)
    if request.start_point is not None:
        # The solver keeps the first point fixed as its depot.
        points.insert(0, request.start_point)
    ordered = order_stops(points, cancel_event=cancel_event)
    if request.end_point is not None:
        ordered.append(request.end_point)
    return ordered


def optimize_route(
    request: StopSequenceRequest,
    *,
    store: TransitNetworkStore | None = None,
    config: MetricsConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> OptimizationResult:
    config = config or MetricsConfig.from_settings()
    logging.info(f"Starting route optimization with {len(request.stops)} stops")
    try:
        ordered = _sequence_points(request, cancel_event)
        path = generate_path(ordered)
        total_distance = path_distance_km(path)
        travel_time = estimate_travel_time_minutes(total_distance, config)
        cost = operational_cost(total_distance, travel_time, config)
        coverage = coverage_score(path, store or get_network(), config=config)
    except Exception as e:
        logging.error(f"Error during route optimization: {e}")
        return OptimizationResult(success=False, objective=request.objective, error_message=str(e))

    violations: dict[str, float] = {}
    if total_distance > request.max_length_km:
        violations["distance_km"] = total_distance - request.max_length_km
    if travel_time > request.max_travel_time_minutes:
        violations["duration_min"] = float(travel_time - request.max_travel_time_minutes)

    return OptimizationResult(
        success=True,
        objective=request.objective,
        optimized_stops=ordered,
        optimized_path=path,
        total_distance_km=total_distance,
        estimated_travel_time_minutes=travel_time,
        estimated_cost=cost,
        coverage_score=coverage,
        constraint_violations=violations,
    )


def generate_route_alternatives(
    request: StopSequenceRequest,
    number_of_alternatives: int = 3,
    *,
    store: TransitNetworkStore | None = None,
) -> list[OptimizationResult]:
    """Optimize one variant per goal and return the successful ones, shortest first."""
    alternatives: list[OptimizationResult] = []
    for variant in range(number_of_alternatives):
        goal = ALTERNATIVE_GOALS[variant % len(ALTERNATIVE_GOALS)]
        variant_request = replace(request, stops=list(request.stops), objective=goal)
        result = optimize_route(variant_request, store=store)
        if result.success:
            alternatives.append(result)
    return sorted(alternatives, key=lambda result: result.total_distance_km)


def route_suggestions(distance: float, stop_count: int) -> list[str]:
    suggestions: list[str] = []
    if distance > SPLIT_ROUTE_DISTANCE_KM:
        suggestions.append(SPLIT_ROUTE_SUGGESTION)
    if stop_count < MIN_STOPS_PER_ROUTE:
        suggestions.append(ADD_STOPS_SUGGESTION)
    if stop_count > MAX_STOPS_PER_ROUTE:
        suggestions.append(REDUCE_STOPS_SUGGESTION)
    return suggestions


def analyze_route_path(
    route: RoutePath,
    store: TransitNetworkStore,
    *,
    config: MetricsConfig | None = None,
    saved_requests: int = 0,
) -> RouteAnalysis:
    config = config or MetricsConfig.from_settings()
    distance = path_distance_km(route.path)
    coverage = coverage_score(route, store, config=config)
    cost_per_km = route.operational_cost / distance if distance > 0 else 0.0
    return RouteAnalysis(
        route_id=route.id,
        efficiency_score=efficiency_score(distance, route.estimated_travel_time_minutes, coverage, config),
        coverage_score=coverage,
        cost_per_km=cost_per_km,
        # Rough daily average until ridership data is available.
        average_passengers_per_day=max(50, saved_requests // 30),
        suggestions=route_suggestions(distance, len(route.stops)),
    )


def analyze_route(route_id: int, *, store: TransitNetworkStore | None = None) -> RouteAnalysis:
    store = store or get_network()
    route = store.get_route(route_id)
    if route is None:
        raise LookupError(f"Route {route_id} not found")
    return analyze_route_path(route, store, saved_requests=trip_store.count_requests_for_route(route_id))


def _candidate_points(service_area: Polygon) -> np.ndarray:
    min_x, min_y, max_x, max_y = service_area.bounds
    xs = np.linspace(min_x, max_x, CANDIDATE_GRID_SIZE)
    ys = np.linspace(min_y, max_y, CANDIDATE_GRID_SIZE)
    candidates = [(x, y) for x in xs for y in ys if service_area.covers(Point(x, y))]
    return np.array(candidates, dtype=float)


def find_optimal_stop_locations(service_area: Polygon, max_stops: int, *, random_state: int = 42) -> list[Stop]:
    """Propose up to ``max_stops`` evenly spread stop locations inside ``service_area``.

    Grid points inside the area are clustered with k-means; each proposal is
    the grid point closest to a cluster centre, so it always lies inside the
    area even when the polygon is not convex.
    """
    if max_stops < 1:
        raise ValueError("max_stops must be >= 1")
    if service_area.is_empty or not service_area.is_valid:
        raise ValueError("Service area must be a valid, non-empty polygon")

    candidates = _candidate_points(service_area)
    if len(candidates) == 0:
        centroid = service_area.representative_point()
        candidates = np.array([(centroid.x, centroid.y)], dtype=float)

    # Scale longitude so clustering distances are roughly isotropic.
    lat_scale = np.cos(np.radians(candidates[:, 1].mean()))
    projected = np.column_stack([candidates[:, 0] * lat_scale, candidates[:, 1]])

    cluster_count = min(max_stops, len(candidates))
    kmeans = KMeans(n_clusters=cluster_count, random_state=random_state, n_init=10)
    kmeans.fit(projected)

    proposals: list[Stop] = []
    for center in kmeans.cluster_centers_:
        nearest = int(np.argmin(((projected - center) ** 2).sum(axis=1)))
        lon, lat = candidates[nearest]
        proposals.append(
            Stop(
                id=-(len(proposals) + 1),
                name=f"Proposed Stop {len(proposals) + 1}",
                location=GeoPoint(latitude=float(lat), longitude=float(lon)),
                is_active=False,
                zone_type="proposed",
            )
        )
    return proposals


# Schema conversion and persistence


def _to_point(model: GeoPointModel) -> GeoPoint:
    return GeoPoint(latitude=model.latitude, longitude=model.longitude)


def _to_model(point: GeoPoint) -> GeoPointModel:
    return GeoPointModel(latitude=point.latitude, longitude=point.longitude)


def request_from_payload(payload: RouteOptimizationRequest) -> StopSequenceRequest:
    return StopSequenceRequest(
        stops=[_to_point(stop) for stop in payload.required_stops],
        start_point=_to_point(payload.start_point) if payload.start_point else None,
        end_point=_to_point(payload.end_point) if payload.end_point else None,
        max_length_km=payload.max_route_length_km,
        max_travel_time_minutes=payload.max_travel_time_minutes,
        objective=payload.optimization_goal,
    )


def result_to_response(result: OptimizationResult, metadata: dict | None = None) -> RouteOptimizationResponse:
    return RouteOptimizationResponse(
        success=result.success,
        optimization_goal=result.objective,
        optimized_stops=[_to_model(point) for point in result.optimized_stops],
        optimized_path=[_to_model(point) for point in result.optimized_path],
        total_distance_km=result.total_distance_km,
        estimated_travel_time_minutes=result.estimated_travel_time_minutes,
        estimated_cost=result.estimated_cost,
        coverage_score=result.coverage_score,
        constraint_violations=result.constraint_violations,
        error_message=result.error_message,
        metadata=metadata or {},
    )


def _persist_result(result: OptimizationResult, metadata: dict) -> dict:
    storage = FileStorage()
    run_dir = storage.make_run_directory(prefix="optimization")
    summary_path = run_dir / "summary.json"
    stops_path = run_dir / "stops.csv"
    storage.write_json(summary_path, optimization_result_to_json(result, metadata))
    storage.write_csv(stops_path, optimization_result_to_csv(result))
    logging.info(f"Persisted optimization run to {run_dir}")
    return {"run_directory": str(run_dir), "files": {"summary": str(summary_path), "stops": str(stops_path)}}


def optimize_route_request(payload: RouteOptimizationRequest) -> RouteOptimizationResponse:
    result = optimize_route(request_from_payload(payload))
    metadata: dict = {"stop_count": len(payload.required_stops)}
    if payload.run_label:
        metadata["run_label"] = payload.run_label
    if payload.persist and result.success:
        metadata["outputs"] = _persist_result(result, metadata)
    return result_to_response(result, metadata)


def proposals_to_response(stops: Sequence[Stop]) -> StopLocationResponse:
    return StopLocationResponse(
        stops=[
            ProposedStopModel(name=stop.name, location=_to_model(stop.location), zone_type=stop.zone_type)
            for stop in stops
        ]
    )


def analysis_to_response(analysis: RouteAnalysis) -> RouteAnalysisResponse:
    return RouteAnalysisResponse(
        route_id=analysis.route_id,
        efficiency_score=analysis.efficiency_score,
        coverage_score=analysis.coverage_score,
        cost_per_km=analysis.cost_per_km,
        average_passengers_per_day=analysis.average_passengers_per_day,
        improvement_suggestions=analysis.suggestions,
    )

"""OR-Tools stop-sequence optimization.

A single vehicle starts and ends at the first point (the depot); the solver
orders the remaining points to minimise total haversine distance. Any solver
failure falls back to a deterministic nearest-neighbor ordering.
"""

from __future__ import annotations

import logging
import threading
from typing import Sequence

from ortools.constraint_solver import pywrapcp, routing_enums_pb2

from ...config import settings
from ...models.domain import GeoPoint
from ..geospatial import distance_km


def build_distance_matrix(points: Sequence[GeoPoint]) -> list[list[int]]:
    """Square matrix of whole metres between every pair of points."""
    size = len(points)
    matrix = [[0] * size for _ in range(size)]
    for i in range(size):
        for j in range(size):
            if i != j:
                matrix[i][j] = int(distance_km(points[i], points[j]) * 1000)
    return matrix


def nearest_neighbor_order(points: Sequence[GeoPoint]) -> list[GeoPoint]:
    """Greedy ordering from the first point; always a permutation of the input."""
    if len(points) <= 1:
        return list(points)

    remaining = list(points)
    current = remaining.pop(0)
    ordered = [current]
    while remaining:
        nearest_index = min(range(len(remaining)), key=lambda idx: distance_km(current, remaining[idx]))
        current = remaining.pop(nearest_index)
        ordered.append(current)
    return ordered


def _solve_with_ortools(
    points: Sequence[GeoPoint],
    time_limit_seconds: int,
    cancel_event: threading.Event | None,
) -> list[GeoPoint] | None:
    distance_matrix = build_distance_matrix(points)
    manager = pywrapcp.RoutingIndexManager(len(distance_matrix), 1, 0)
    routing = pywrapcp.RoutingModel(manager)

    def distance_callback(from_index: int, to_index: int) -> int:
        from_node = manager.IndexToNode(from_index)
        to_node = manager.IndexToNode(to_index)
        return distance_matrix[from_node][to_node]

    transit_callback_index = routing.RegisterTransitCallback(distance_callback)
    routing.SetArcCostEvaluatorOfAllVehicles(transit_callback_index)

    if cancel_event is not None:
        def stop_when_cancelled() -> None:
            if cancel_event.is_set():
                routing.solver().FinishCurrentSearch()

        routing.AddAtSolutionCallback(stop_when_cancelled)

    search_parameters = pywrapcp.DefaultRoutingSearchParameters()
    search_parameters.first_solution_strategy = getattr(
        routing_enums_pb2.FirstSolutionStrategy, settings.solver_first_solution_strategy
    )
    search_parameters.local_search_metaheuristic = getattr(
        routing_enums_pb2.LocalSearchMetaheuristic, settings.solver_local_search_metaheuristic
    )
    search_parameters.time_limit.FromSeconds(time_limit_seconds)

    assignment = routing.SolveWithParameters(search_parameters)
    if not assignment:
        return None

    ordered: list[GeoPoint] = []
    index = routing.Start(0)
    while not routing.IsEnd(index):
        ordered.append(points[manager.IndexToNode(index)])
        index = assignment.Value(routing.NextVar(index))
    return ordered


def order_stops(
    points: Sequence[GeoPoint],
    *,
    time_limit_seconds: int | None = None,
    cancel_event: threading.Event | None = None,
) -> list[GeoPoint]:
    """Reorder ``points`` into a short visiting sequence starting at ``points[0]``.

    Up to two points are returned unchanged. The solver is tried once; an
    exception, an empty result or a cancellation before the solve all fall
    back to :func:`nearest_neighbor_order`. Cancelling during the solve keeps
    the best solution found so far.
    """
    if len(points) <= 2:
        return list(points)

    if cancel_event is not None and cancel_event.is_set():
        logging.info("Stop ordering cancelled before solving, using nearest neighbor")
        return nearest_neighbor_order(points)

    time_limit = settings.solver_time_limit_seconds if time_limit_seconds is None else time_limit_seconds
    try:
        ordered = _solve_with_ortools(points, time_limit, cancel_event)
    except Exception as e:
        logging.error(f"Error in TSP optimization, falling back to nearest neighbor: {e}")
        return nearest_neighbor_order(points)

    if ordered is None:
        logging.warning(f"No TSP solution found for {len(points)} stops, falling back to nearest neighbor")
        return nearest_neighbor_order(points)
    return ordered

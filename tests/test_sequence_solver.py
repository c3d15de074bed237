import threading

from route_optimizer.models.domain import GeoPoint
from route_optimizer.services.optimization import sequence_solver
from route_optimizer.services.optimization.sequence_solver import (
    build_distance_matrix,
    nearest_neighbor_order,
    order_stops,
)

P0 = GeoPoint(24.70, 46.70)
P1 = GeoPoint(24.73, 46.70)
P2 = GeoPoint(24.71, 46.70)
P3 = GeoPoint(24.72, 46.70)
P4 = GeoPoint(24.715, 46.72)


def test_short_inputs_are_returned_unchanged():
    assert order_stops([]) == []
    assert order_stops([P0]) == [P0]
    assert order_stops([P1, P0]) == [P1, P0]


def test_distance_matrix_is_symmetric_with_zero_diagonal():
    matrix = build_distance_matrix([P0, P1, P2])

    assert [matrix[i][i] for i in range(3)] == [0, 0, 0]
    assert matrix[0][1] == matrix[1][0]
    assert 3300 < matrix[0][1] < 3400


def test_nearest_neighbor_visits_closest_first():
    assert nearest_neighbor_order([P0, P1, P2, P3]) == [P0, P2, P3, P1]


def test_ortools_order_is_a_permutation_from_the_first_point():
    points = [P0, P1, P2, P3, P4]

    ordered = order_stops(points, time_limit_seconds=1)

    assert len(ordered) == len(points)
    assert set(ordered) == set(points)
    assert ordered[0] == P0


def test_solver_error_falls_back_to_nearest_neighbor(monkeypatch):
    def broken(points, time_limit_seconds, cancel_event):
        raise RuntimeError("solver crashed")

    monkeypatch.setattr(sequence_solver, "_solve_with_ortools", broken)

    assert order_stops([P0, P1, P2, P3]) == [P0, P2, P3, P1]


def test_missing_solution_falls_back_to_nearest_neighbor(monkeypatch):
    monkeypatch.setattr(sequence_solver, "_solve_with_ortools", lambda points, limit, event: None)

    assert order_stops([P0, P1, P2, P3]) == [P0, P2, P3, P1]


def test_cancelled_before_solving_skips_solver(monkeypatch):
    calls = []
    monkeypatch.setattr(sequence_solver, "_solve_with_ortools", lambda *args: calls.append(args))
    cancel = threading.Event()
    cancel.set()

    ordered = order_stops([P0, P1, P2, P3], cancel_event=cancel)

    assert ordered == [P0, P2, P3, P1]
    assert calls == []


def test_cancel_event_during_solve_keeps_a_solution():
    cancel = threading.Event()
    cancel.set()
    points = [P0, P1, P2, P3, P4]

    ordered = sequence_solver._solve_with_ortools(points, 1, cancel)

    assert ordered is not None
    assert set(ordered) == set(points)

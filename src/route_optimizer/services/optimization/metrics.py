"""Route metric calculators."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from ...config import settings
from ...models.domain import GeoPoint, RoutePath
from ..geospatial import buffer_path, distance_km
from ..network.store import TransitNetworkStore


@dataclass(frozen=True, slots=True)
class MetricsConfig:
    average_speed_kmh: float = 25.0
    cost_per_km: float = 2.5
    cost_per_minute: float = 0.5
    coverage_radius_meters: float = 500.0
    reference_distance_km: float = 50.0
    reference_travel_time_minutes: float = 120.0

    @classmethod
    def from_settings(cls) -> "MetricsConfig":
        return cls(
            average_speed_kmh=settings.average_bus_speed_kmh,
            cost_per_km=settings.cost_per_km,
            cost_per_minute=settings.cost_per_minute,
            coverage_radius_meters=settings.coverage_radius_meters,
            reference_distance_km=settings.reference_distance_km,
            reference_travel_time_minutes=settings.reference_travel_time_minutes,
        )


def path_distance_km(points: Sequence[GeoPoint]) -> float:
    return sum(distance_km(points[i], points[i + 1]) for i in range(len(points) - 1))


def estimate_travel_time_minutes(distance: float, config: MetricsConfig | None = None) -> int:
    config = config or MetricsConfig()
    return math.ceil(distance / config.average_speed_kmh * 60)


def operational_cost(distance: float, time_minutes: int, config: MetricsConfig | None = None) -> float:
    config = config or MetricsConfig()
    return distance * config.cost_per_km + time_minutes * config.cost_per_minute


def coverage_score(
    path: Sequence[GeoPoint] | RoutePath,
    store: TransitNetworkStore,
    radius_meters: float | None = None,
    config: MetricsConfig | None = None,
) -> float:
    """Share of all known stops within ``radius_meters`` of the path.

    Returns 0.0 for an empty network, an empty path or a failing store.
    """
    config = config or MetricsConfig()
    radius = config.coverage_radius_meters if radius_meters is None else radius_meters
    points = path.path if isinstance(path, RoutePath) else path
    try:
        total = store.count_all_stops()
        if total <= 0 or not points:
            return 0.0
        covered = store.count_stops_within(buffer_path(points, radius))
    except Exception as e:
        logging.error(f"Error calculating route coverage: {e}")
        return 0.0
    return covered / total


def efficiency_score(
    distance: float,
    travel_time_minutes: float,
    coverage: float,
    config: MetricsConfig | None = None,
) -> float:
    """Average of distance, time and coverage sub-scores on a 0-100 scale."""
    config = config or MetricsConfig()
    distance_part = max(0.0, 100 - (distance / config.reference_distance_km * 100))
    time_part = max(0.0, 100 - (travel_time_minutes / config.reference_travel_time_minutes * 100))
    coverage_part = max(0.0, coverage * 100)
    return (distance_part + time_part + coverage_part) / 3.0

"""Route optimization domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from ...models.domain import GeoPoint

OptimizationGoal = Literal["minimize_time", "minimize_distance", "maximize_coverage"]


@dataclass(slots=True)
class StopSequenceRequest:
    stops: List[GeoPoint]
    start_point: Optional[GeoPoint] = None
    end_point: Optional[GeoPoint] = None
    max_length_km: float = 50.0
    max_travel_time_minutes: int = 120
    objective: str = "minimize_time"


@dataclass(slots=True)
class OptimizationResult:
    success: bool
    objective: str = "minimize_time"
    optimized_stops: List[GeoPoint] = field(default_factory=list)
    optimized_path: List[GeoPoint] = field(default_factory=list)
    total_distance_km: float = 0.0
    estimated_travel_time_minutes: int = 0
    estimated_cost: float = 0.0
    coverage_score: float = 0.0
    constraint_violations: dict[str, float] = field(default_factory=dict)
    error_message: Optional[str] = None


@dataclass(slots=True)
class RouteAnalysis:
    route_id: int
    efficiency_score: float
    coverage_score: float
    cost_per_km: float
    average_passengers_per_day: int
    suggestions: List[str]

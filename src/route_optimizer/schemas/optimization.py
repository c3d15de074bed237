"""Route optimization request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .trips import GeoPointModel


class RouteOptimizationRequest(BaseModel):
    required_stops: List[GeoPointModel] = Field(default_factory=list)
    start_point: Optional[GeoPointModel] = None
    end_point: Optional[GeoPointModel] = None
    max_route_length_km: float = Field(default=50.0, gt=0)
    max_travel_time_minutes: int = Field(default=120, gt=0)
    optimization_goal: str = Field(
        default="minimize_time",
        description="minimize_time, minimize_distance or maximize_coverage.",
    )
    persist: bool = False
    run_label: Optional[str] = Field(default=None, description="Friendly name for persisted outputs.")


class RouteOptimizationResponse(BaseModel):
    success: bool
    optimization_goal: str
    optimized_stops: List[GeoPointModel]
    optimized_path: List[GeoPointModel]
    total_distance_km: float
    estimated_travel_time_minutes: int
    estimated_cost: float
    coverage_score: float
    constraint_violations: Dict[str, float]
    error_message: Optional[str] = None
    metadata: dict = Field(default_factory=dict)


class StopOrderRequest(BaseModel):
    stops: List[GeoPointModel]


class StopOrderResponse(BaseModel):
    stops: List[GeoPointModel]


class RouteAnalysisResponse(BaseModel):
    route_id: int
    efficiency_score: float
    coverage_score: float
    cost_per_km: float
    average_passengers_per_day: int
    improvement_suggestions: List[str]


class StopLocationRequest(BaseModel):
    service_area: List[Tuple[float, float]] = Field(
        ..., min_length=3, description="Polygon vertices as (latitude, longitude) pairs."
    )
    max_stops: int = Field(..., ge=1, le=200)


class ProposedStopModel(BaseModel):
    name: str
    location: GeoPointModel
    zone_type: str


class StopLocationResponse(BaseModel):
    stops: List[ProposedStopModel]

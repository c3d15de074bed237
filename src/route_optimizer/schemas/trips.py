"""Trip planning request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..config import settings


class GeoPointModel(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class TripPreferencesModel(BaseModel):
    max_walking_distance_meters: float = Field(default=settings.default_max_walking_distance_meters, ge=0)
    accessibility_required: bool = False
    route_type: str = Field(
        default="fastest",
        description="Ranking objective: fastest, cheapest or least_transfers. Unknown values rank as fastest.",
    )
    avoid_crowded_routes: bool = False


class TripPlanRequest(BaseModel):
    origin: GeoPointModel
    destination: GeoPointModel
    departure_time: datetime
    preferences: TripPreferencesModel = Field(default_factory=TripPreferencesModel)


class TripSegmentModel(BaseModel):
    type: Literal["walking", "bus", "waiting"]
    start_location: GeoPointModel
    end_location: GeoPointModel
    start_location_name: Optional[str] = None
    end_location_name: Optional[str] = None
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    distance_meters: float
    cost: float
    route_id: Optional[int] = None
    route_name: Optional[str] = None
    bus_id: Optional[int] = None
    walking_instructions: Optional[str] = None


class TripOptionModel(BaseModel):
    id: str
    segments: List[TripSegmentModel]
    total_travel_time_minutes: int
    total_walking_distance_meters: float
    total_cost: float
    transfer_count: int
    departure_time: datetime
    arrival_time: datetime
    route_type: Literal["walking", "direct", "transfer"]
    confidence_score: float = Field(..., ge=0.5, le=1.0)


class TripPlanResponse(BaseModel):
    options: List[TripOptionModel]


class RealTimeUpdateModel(BaseModel):
    route_id: int
    bus_id: int
    current_location: GeoPointModel
    delay_minutes: int
    last_updated: datetime
    status: Literal["on_time", "delayed", "cancelled"]


class SaveTripRequest(BaseModel):
    user_id: int
    request: TripPlanRequest
    selected_route_id: Optional[int] = None


class TripHistoryItem(BaseModel):
    user_id: int
    origin: GeoPointModel
    destination: GeoPointModel
    requested_time: datetime
    preferences: dict
    selected_route_id: Optional[int] = None
    created_at: Optional[datetime] = None

"""Transit network response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from .trips import GeoPointModel


class StopModel(BaseModel):
    id: int
    name: str
    location: GeoPointModel
    is_accessible: bool
    is_active: bool
    zone_type: str


class RouteModel(BaseModel):
    id: int
    name: str
    code: str
    is_active: bool
    estimated_travel_time_minutes: int
    operational_cost: float
    stop_ids: List[int]
    path: List[GeoPointModel]


class BusModel(BaseModel):
    id: int
    ref_number: str
    capacity: int
    bus_type: str
    is_active: bool
    current_route_id: Optional[int] = None
    current_location: Optional[GeoPointModel] = None


class RouteDetailModel(RouteModel):
    stops: List[StopModel]
    buses: List[BusModel]

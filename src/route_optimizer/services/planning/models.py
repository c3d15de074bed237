"""Trip planning domain models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Literal, Optional, Union

from ...config import settings
from ...models.domain import GeoPoint

Objective = Literal["fastest", "cheapest", "least_transfers"]
RouteClassification = Literal["walking", "direct", "transfer"]


@dataclass(frozen=True, slots=True)
class WalkingSegment:
    kind: ClassVar[str] = "walking"

    start_location: GeoPoint
    end_location: GeoPoint
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    distance_meters: float
    instructions: str = ""
    cost: float = 0.0


@dataclass(frozen=True, slots=True)
class BusSegment:
    kind: ClassVar[str] = "bus"

    start_location: GeoPoint
    end_location: GeoPoint
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    distance_meters: float
    route_id: int
    route_name: str
    cost: float
    bus_id: Optional[int] = None
    start_location_name: Optional[str] = None
    end_location_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class WaitingSegment:
    kind: ClassVar[str] = "waiting"

    start_location: GeoPoint
    end_location: GeoPoint
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    distance_meters: float = 0.0
    cost: float = 0.0
    location_name: Optional[str] = None


Segment = Union[WalkingSegment, BusSegment, WaitingSegment]


@dataclass(frozen=True, slots=True)
class Itinerary:
    """A complete origin-to-destination plan.

    ``confidence_score`` is a heuristic reliability indicator in [0.5, 1.0],
    not a probability.
    """

    segments: tuple[Segment, ...]
    total_travel_time_minutes: int
    total_walking_distance_meters: float
    total_cost: float
    transfer_count: int
    departure_time: datetime
    arrival_time: datetime
    route_classification: RouteClassification
    confidence_score: float
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def bus_segments(self) -> tuple[BusSegment, ...]:
        return tuple(segment for segment in self.segments if isinstance(segment, BusSegment))


@dataclass(frozen=True, slots=True)
class PreferenceProfile:
    max_walking_distance_meters: float = settings.default_max_walking_distance_meters
    accessibility_required: bool = False
    objective: str = "fastest"
    # Not used in ranking: no crowding data is available.
    avoid_crowded_routes: bool = False


@dataclass(frozen=True, slots=True)
class PlannerConfig:
    walking_speed_mps: float = 1.4
    boarding_wait_minutes: int = 5
    transfer_wait_minutes: int = 5
    bus_fare: float = 2.50
    long_walk_threshold_minutes: int = 10
    max_trip_options: int = 3

    @classmethod
    def from_settings(cls) -> "PlannerConfig":
        return cls(
            walking_speed_mps=settings.walking_speed_mps,
            boarding_wait_minutes=settings.boarding_wait_minutes,
            transfer_wait_minutes=settings.transfer_wait_minutes,
            bus_fare=settings.bus_fare,
            long_walk_threshold_minutes=settings.long_walk_threshold_minutes,
            max_trip_options=settings.max_trip_options,
        )


@dataclass(frozen=True, slots=True)
class RealTimeUpdate:
    route_id: int
    bus_id: int
    current_location: GeoPoint
    delay_minutes: int
    last_updated: datetime
    status: Literal["on_time", "delayed", "cancelled"] = "on_time"

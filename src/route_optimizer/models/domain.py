"""Domain models for the transit network."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS84 coordinate pair."""

    latitude: float
    longitude: float

    def as_lon_lat(self) -> tuple[float, float]:
        return (self.longitude, self.latitude)


@dataclass(frozen=True, slots=True)
class Stop:
    """A bus stop owned by the transit network."""

    id: int
    name: str
    location: GeoPoint
    is_accessible: bool = True
    is_active: bool = True
    zone_type: str = ""


@dataclass(frozen=True, slots=True)
class RoutePath:
    """A bus route with its stops in service order.

    ``path`` holds the route geometry; when the network does not provide one
    the stop locations are used.
    """

    id: int
    name: str
    stops: tuple[Stop, ...]
    estimated_travel_time_minutes: int
    operational_cost: float = 0.0
    is_active: bool = True
    code: str = ""
    path: tuple[GeoPoint, ...] = ()

    def __post_init__(self) -> None:
        if not self.path:
            object.__setattr__(self, "path", tuple(stop.location for stop in self.stops))

    def serves(self, stop: Stop) -> bool:
        return any(candidate.id == stop.id for candidate in self.stops)


@dataclass(frozen=True, slots=True)
class Bus:
    """A vehicle that may currently be running on a route."""

    id: int
    ref_number: str
    capacity: int = 0
    bus_type: str = "standard"
    is_active: bool = True
    current_route_id: Optional[int] = None
    current_location: Optional[GeoPoint] = None


@dataclass(slots=True)
class TripRequestRecord:
    """A planning request saved for a user's trip history."""

    user_id: int
    origin: GeoPoint
    destination: GeoPoint
    requested_time: datetime
    preferences: dict = field(default_factory=dict)
    selected_route_id: Optional[int] = None
    created_at: Optional[datetime] = None

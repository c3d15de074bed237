"""Read interface over the transit network and its in-memory implementation."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

from ...models.domain import Bus, GeoPoint, RoutePath, Stop
from ..geospatial import buffer_point, distance_meters, to_shapely


class TransitNetworkStore(Protocol):
    """Queries the planner and optimizer need from the network."""

    def find_stops_near(self, point: GeoPoint, radius_meters: float) -> Sequence[Stop]: ...

    def find_routes_serving(self, stop: Stop) -> Sequence[RoutePath]: ...

    def find_routes_serving_both(self, stop_a: Stop, stop_b: Stop) -> Sequence[RoutePath]: ...

    def count_stops_within(self, region: BaseGeometry) -> int: ...

    def count_all_stops(self) -> int: ...

    def get_route(self, route_id: int) -> Optional[RoutePath]: ...

    def list_stops(self) -> Sequence[Stop]: ...

    def list_routes(self) -> Sequence[RoutePath]: ...

    def buses_on_route(self, route_id: int) -> Sequence[Bus]: ...


class InMemoryTransitNetwork:
    """Network snapshot indexed with a shapely STRtree.

    The snapshot is read-only after construction, so instances can be shared
    between request threads.
    """

    def __init__(
        self,
        stops: Iterable[Stop] = (),
        routes: Iterable[RoutePath] = (),
        buses: Iterable[Bus] = (),
        *,
        max_nearby_stops: int = 10,
    ) -> None:
        self._stops: tuple[Stop, ...] = tuple(stops)
        self._routes: tuple[RoutePath, ...] = tuple(routes)
        self._buses: tuple[Bus, ...] = tuple(buses)
        self.max_nearby_stops = max_nearby_stops
        self._routes_by_id = {route.id: route for route in self._routes}
        self._stops_by_id = {stop.id: stop for stop in self._stops}
        self._tree = STRtree([to_shapely(stop.location) for stop in self._stops]) if self._stops else None

    @property
    def stops(self) -> tuple[Stop, ...]:
        return self._stops

    @property
    def routes(self) -> tuple[RoutePath, ...]:
        return self._routes

    @property
    def buses(self) -> tuple[Bus, ...]:
        return self._buses

    def get_stop(self, stop_id: int) -> Optional[Stop]:
        return self._stops_by_id.get(stop_id)

    def get_route(self, route_id: int) -> Optional[RoutePath]:
        return self._routes_by_id.get(route_id)

    def list_stops(self) -> list[Stop]:
        return list(self._stops)

    def list_routes(self) -> list[RoutePath]:
        return list(self._routes)

    def _indices_within(self, region: BaseGeometry) -> list[int]:
        if self._tree is None:
            return []
        return [int(index) for index in self._tree.query(region, predicate="intersects")]

    def find_stops_near(self, point: GeoPoint, radius_meters: float) -> list[Stop]:
        """Active stops inside the buffered search area, nearest first."""

        region = buffer_point(point, radius_meters)
        candidates = [self._stops[index] for index in self._indices_within(region)]
        active = [stop for stop in candidates if stop.is_active]
        active.sort(key=lambda stop: (distance_meters(point, stop.location), stop.id))
        return active[: self.max_nearby_stops]

    def find_routes_serving(self, stop: Stop) -> list[RoutePath]:
        return [route for route in self._routes if route.is_active and route.serves(stop)]

    def find_routes_serving_both(self, stop_a: Stop, stop_b: Stop) -> list[RoutePath]:
        return [
            route
            for route in self._routes
            if route.is_active and route.serves(stop_a) and route.serves(stop_b)
        ]

    def count_stops_within(self, region: BaseGeometry) -> int:
        return len(self._indices_within(region))

    def count_all_stops(self) -> int:
        return len(self._stops)

    def buses_on_route(self, route_id: int) -> list[Bus]:
        return [bus for bus in self._buses if bus.is_active and bus.current_route_id == route_id]

"""Candidate itinerary generation over the transit network."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ...models.domain import GeoPoint, RoutePath, Stop
from ..geospatial import distance_meters
from ..network.store import TransitNetworkStore
from .models import (
    BusSegment,
    Itinerary,
    PlannerConfig,
    PreferenceProfile,
    Segment,
    WaitingSegment,
    WalkingSegment,
)
from .ranking import classify_route, confidence_score


class ItinerarySearch:
    """Builds walk-bus-walk options, with at most one transfer.

    Timing is coarse: every boarding costs a fixed wait and a
    partial ride is assumed to take half of the route's end-to-end time.
    """

    def __init__(self, store: TransitNetworkStore, config: PlannerConfig | None = None) -> None:
        self.store = store
        self.config = config or PlannerConfig.from_settings()

    def search(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        departure_time: datetime,
        preferences: PreferenceProfile,
    ) -> list[Itinerary]:
        origin_stops = self.store.find_stops_near(origin, preferences.max_walking_distance_meters)
        destination_stops = self.store.find_stops_near(destination, preferences.max_walking_distance_meters)

        if not origin_stops or not destination_stops:
            logging.warning("No nearby bus stops found for trip planning")
            return []

        options = self.find_direct(origin, destination, departure_time, preferences, origin_stops, destination_stops)
        options.extend(
            self.find_with_transfer(origin, destination, departure_time, preferences, origin_stops, destination_stops)
        )
        return options

    def find_direct(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        departure_time: datetime,
        preferences: PreferenceProfile,
        origin_stops: Sequence[Stop],
        destination_stops: Sequence[Stop],
    ) -> list[Itinerary]:
        options: list[Itinerary] = []
        for origin_stop in origin_stops:
            for destination_stop in destination_stops:
                for route in self.store.find_routes_serving_both(origin_stop, destination_stop):
                    option = self._direct_option(
                        origin, destination, departure_time, preferences, route, origin_stop, destination_stop
                    )
                    if option is not None:
                        options.append(option)
        return options

    def find_with_transfer(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        departure_time: datetime,
        preferences: PreferenceProfile,
        origin_stops: Sequence[Stop],
        destination_stops: Sequence[Stop],
    ) -> list[Itinerary]:
        destination_ids = {stop.id for stop in destination_stops}
        options: list[Itinerary] = []

        for origin_stop in origin_stops:
            for first_route in self.store.find_routes_serving(origin_stop):
                for transfer_stop in first_route.stops:
                    if transfer_stop.id == origin_stop.id:
                        continue
                    for second_route in self.store.find_routes_serving(transfer_stop):
                        if second_route.id == first_route.id:
                            continue
                        final_stop = self._closest_destination_stop(second_route, destination_ids, destination)
                        if final_stop is None:
                            continue
                        option = self._transfer_option(
                            origin,
                            destination,
                            departure_time,
                            preferences,
                            first_route,
                            origin_stop,
                            transfer_stop,
                            second_route,
                            final_stop,
                        )
                        if option is not None:
                            options.append(option)
        return options

    @staticmethod
    def _closest_destination_stop(route: RoutePath, destination_ids: set[int], destination: GeoPoint) -> Optional[Stop]:
        candidates = [stop for stop in route.stops if stop.id in destination_ids]
        if not candidates:
            return None
        return min(candidates, key=lambda stop: distance_meters(stop.location, destination))

    def _direct_option(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        departure_time: datetime,
        preferences: PreferenceProfile,
        route: RoutePath,
        origin_stop: Stop,
        destination_stop: Stop,
    ) -> Optional[Itinerary]:
        try:
            walk_to_stop = self.walking_segment(origin, origin_stop.location, departure_time, "Walk to bus stop")
            bus = self.bus_segment(route, origin_stop, destination_stop, walk_to_stop.end_time)
            walk_from_stop = self.walking_segment(
                destination_stop.location, destination, bus.end_time, "Walk to destination"
            )
            return self._assemble([walk_to_stop, bus, walk_from_stop], departure_time, preferences)
        except Exception as e:
            logging.error(f"Error creating trip option on route {route.id}: {e}")
            return None

    def _transfer_option(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        departure_time: datetime,
        preferences: PreferenceProfile,
        first_route: RoutePath,
        origin_stop: Stop,
        transfer_stop: Stop,
        second_route: RoutePath,
        final_stop: Stop,
    ) -> Optional[Itinerary]:
        try:
            walk_to_first = self.walking_segment(origin, origin_stop.location, departure_time, "Walk to first bus stop")
            first_bus = self.bus_segment(first_route, origin_stop, transfer_stop, walk_to_first.end_time)
            wait = self.waiting_segment(transfer_stop, first_bus.end_time)
            second_bus = self.bus_segment(second_route, transfer_stop, final_stop, wait.end_time)
            walk_from_final = self.walking_segment(final_stop.location, destination, second_bus.end_time, "Walk to destination")
            return self._assemble(
                [walk_to_first, first_bus, wait, second_bus, walk_from_final], departure_time, preferences
            )
        except Exception as e:
            logging.error(
                f"Error creating transfer trip option via stop {transfer_stop.id} "
                f"(routes {first_route.id} -> {second_route.id}): {e}"
            )
            return None

    def _assemble(
        self,
        segments: list[Segment],
        departure_time: datetime,
        preferences: PreferenceProfile,
    ) -> Optional[Itinerary]:
        walking_distance = sum(segment.distance_meters for segment in segments if isinstance(segment, WalkingSegment))
        if walking_distance > preferences.max_walking_distance_meters:
            return None

        return Itinerary(
            segments=tuple(segments),
            total_travel_time_minutes=sum(segment.duration_minutes for segment in segments),
            total_walking_distance_meters=walking_distance,
            total_cost=sum(segment.cost for segment in segments),
            transfer_count=sum(1 for segment in segments if isinstance(segment, WaitingSegment)),
            departure_time=departure_time,
            arrival_time=segments[-1].end_time,
            route_classification=classify_route(segments),
            confidence_score=confidence_score(segments, self.config),
        )

    def walking_segment(self, start: GeoPoint, end: GeoPoint, start_time: datetime, instructions: str) -> WalkingSegment:
        distance = distance_meters(start, end)
        minutes = math.ceil(distance / self.config.walking_speed_mps / 60)
        return WalkingSegment(
            start_location=start,
            end_location=end,
            start_time=start_time,
            end_time=start_time + timedelta(minutes=minutes),
            duration_minutes=minutes,
            distance_meters=distance,
            instructions=instructions,
        )

    def bus_segment(self, route: RoutePath, board: Stop, alight: Stop, ready_time: datetime) -> BusSegment:
        wait = self.config.boarding_wait_minutes
        # Half of the end-to-end time stands in for the partial ride.
        ride = route.estimated_travel_time_minutes // 2
        boarding_time = ready_time + timedelta(minutes=wait)
        buses = self.store.buses_on_route(route.id)
        return BusSegment(
            start_location=board.location,
            end_location=alight.location,
            start_time=boarding_time,
            end_time=boarding_time + timedelta(minutes=ride),
            duration_minutes=wait + ride,
            distance_meters=distance_meters(board.location, alight.location),
            route_id=route.id,
            route_name=route.name,
            cost=self.config.bus_fare,
            bus_id=buses[0].id if buses else None,
            start_location_name=board.name,
            end_location_name=alight.name,
        )

    def waiting_segment(self, stop: Stop, start_time: datetime) -> WaitingSegment:
        minutes = self.config.transfer_wait_minutes
        return WaitingSegment(
            start_location=stop.location,
            end_location=stop.location,
            start_time=start_time,
            end_time=start_time + timedelta(minutes=minutes),
            duration_minutes=minutes,
            location_name=stop.name,
        )

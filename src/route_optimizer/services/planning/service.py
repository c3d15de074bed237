"""Trip planning orchestration service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from ...models.domain import GeoPoint, Stop, TripRequestRecord
from ...persistence import trips as trip_store
from ...schemas.trips import (
    GeoPointModel,
    RealTimeUpdateModel,
    TripHistoryItem,
    TripOptionModel,
    TripPlanRequest,
    TripPlanResponse,
    TripSegmentModel,
)
from ..network import get_network
from ..network.store import TransitNetworkStore
from ..realtime.delays import DelayBoard, delay_board
from .delays import apply_delays
from .models import (
    BusSegment,
    Itinerary,
    PlannerConfig,
    PreferenceProfile,
    RealTimeUpdate,
    Segment,
    WaitingSegment,
    WalkingSegment,
)
from .ranking import rank_itineraries
from .search import ItinerarySearch


def plan_trip(
    origin: GeoPoint,
    destination: GeoPoint,
    departure_time: datetime,
    preferences: PreferenceProfile,
    *,
    store: TransitNetworkStore | None = None,
    config: PlannerConfig | None = None,
) -> list[Itinerary]:
    """Ranked itineraries between two points, at most ``config.max_trip_options``.

    Upstream failures are logged and yield an empty list.
    """
    config = config or PlannerConfig.from_settings()
    logging.info(
        f"Planning trip from {origin.latitude},{origin.longitude} "
        f"to {destination.latitude},{destination.longitude}"
    )
    try:
        store = store or get_network()
        candidates = ItinerarySearch(store, config).search(origin, destination, departure_time, preferences)
        ranked = rank_itineraries(candidates, preferences)
    except Exception as e:
        logging.exception(f"Error planning trip: {e}")
        return []
    return ranked[: config.max_trip_options]


def get_optimal_trip(
    origin: GeoPoint,
    destination: GeoPoint,
    departure_time: datetime,
    preferences: PreferenceProfile,
    *,
    store: TransitNetworkStore | None = None,
) -> Optional[Itinerary]:
    options = plan_trip(origin, destination, departure_time, preferences, store=store)
    return options[0] if options else None


def find_nearby_stops(point: GeoPoint, radius_meters: float = 500, *, store: TransitNetworkStore | None = None) -> list[Stop]:
    try:
        store = store or get_network()
        return list(store.find_stops_near(point, radius_meters))
    except Exception as e:
        logging.error(f"Error finding nearby stops: {e}")
        return []


def get_realtime_updates(
    route_id: int,
    *,
    store: TransitNetworkStore | None = None,
    delays: DelayBoard | None = None,
) -> list[RealTimeUpdate]:
    """One update per active bus on the route, carrying the latest reported delay."""
    delays = delays or delay_board
    try:
        store = store or get_network()
        buses = store.buses_on_route(route_id)
    except Exception as e:
        logging.error(f"Error getting real-time updates for route {route_id}: {e}")
        return []

    delay = delays.delay_for(route_id)
    now = datetime.now(timezone.utc)
    return [
        RealTimeUpdate(
            route_id=route_id,
            bus_id=bus.id,
            current_location=bus.current_location or GeoPoint(0.0, 0.0),
            delay_minutes=delay,
            last_updated=now,
            status="delayed" if delay > 0 else "on_time",
        )
        for bus in buses
    ]


def apply_realtime_delays(
    itinerary: Itinerary,
    *,
    store: TransitNetworkStore | None = None,
    delays: DelayBoard | None = None,
) -> Itinerary:
    """New itinerary with bus segments shifted by the current route delays."""

    def delay_for_route(route_id: int) -> int:
        updates = get_realtime_updates(route_id, store=store, delays=delays)
        return updates[0].delay_minutes if updates else 0

    try:
        return apply_delays(itinerary, delay_for_route)
    except Exception as e:
        logging.error(f"Error updating trip with real-time data: {e}")
        return itinerary


def save_trip_request(user_id: int, request: TripPlanRequest, selected_route_id: int | None = None) -> bool:
    record = TripRequestRecord(
        user_id=user_id,
        origin=to_geopoint(request.origin),
        destination=to_geopoint(request.destination),
        requested_time=request.departure_time,
        preferences=request.preferences.model_dump(),
        selected_route_id=selected_route_id,
    )
    return trip_store.save_trip_request(record)


def get_user_trip_history(user_id: int, page_size: int = 20) -> list[TripHistoryItem]:
    return [
        TripHistoryItem(
            user_id=record.user_id,
            origin=to_point_model(record.origin),
            destination=to_point_model(record.destination),
            requested_time=record.requested_time,
            preferences=record.preferences,
            selected_route_id=record.selected_route_id,
            created_at=record.created_at,
        )
        for record in trip_store.get_user_trip_history(user_id, page_size=page_size)
    ]


# Schema conversion


def to_geopoint(model: GeoPointModel) -> GeoPoint:
    return GeoPoint(latitude=model.latitude, longitude=model.longitude)


def to_point_model(point: GeoPoint) -> GeoPointModel:
    return GeoPointModel(latitude=point.latitude, longitude=point.longitude)


def preferences_from_request(payload: TripPlanRequest) -> PreferenceProfile:
    prefs = payload.preferences
    return PreferenceProfile(
        max_walking_distance_meters=prefs.max_walking_distance_meters,
        accessibility_required=prefs.accessibility_required,
        objective=prefs.route_type,
        avoid_crowded_routes=prefs.avoid_crowded_routes,
    )


def segment_to_model(segment: Segment) -> TripSegmentModel:
    data = {
        "type": segment.kind,
        "start_location": to_point_model(segment.start_location),
        "end_location": to_point_model(segment.end_location),
        "start_time": segment.start_time,
        "end_time": segment.end_time,
        "duration_minutes": segment.duration_minutes,
        "distance_meters": segment.distance_meters,
        "cost": segment.cost,
    }
    if isinstance(segment, WalkingSegment):
        data["walking_instructions"] = segment.instructions
    elif isinstance(segment, BusSegment):
        data.update(
            route_id=segment.route_id,
            route_name=segment.route_name,
            bus_id=segment.bus_id,
            start_location_name=segment.start_location_name,
            end_location_name=segment.end_location_name,
        )
    elif isinstance(segment, WaitingSegment):
        data.update(start_location_name=segment.location_name, end_location_name=segment.location_name)
    return TripSegmentModel(**data)


def itinerary_to_model(itinerary: Itinerary) -> TripOptionModel:
    return TripOptionModel(
        id=itinerary.id,
        segments=[segment_to_model(segment) for segment in itinerary.segments],
        total_travel_time_minutes=itinerary.total_travel_time_minutes,
        total_walking_distance_meters=itinerary.total_walking_distance_meters,
        total_cost=itinerary.total_cost,
        transfer_count=itinerary.transfer_count,
        departure_time=itinerary.departure_time,
        arrival_time=itinerary.arrival_time,
        route_type=itinerary.route_classification,
        confidence_score=itinerary.confidence_score,
    )


def itinerary_from_model(model: TripOptionModel) -> Itinerary:
    segments: list[Segment] = []
    for item in model.segments:
        common = {
            "start_location": to_geopoint(item.start_location),
            "end_location": to_geopoint(item.end_location),
            "start_time": item.start_time,
            "end_time": item.end_time,
            "duration_minutes": item.duration_minutes,
            "distance_meters": item.distance_meters,
            "cost": item.cost,
        }
        if item.type == "walking":
            segments.append(WalkingSegment(instructions=item.walking_instructions or "", **common))
        elif item.type == "bus":
            if item.route_id is None:
                raise ValueError("Bus segments require a route_id.")
            segments.append(
                BusSegment(
                    route_id=item.route_id,
                    route_name=item.route_name or "",
                    bus_id=item.bus_id,
                    start_location_name=item.start_location_name,
                    end_location_name=item.end_location_name,
                    **common,
                )
            )
        else:
            segments.append(WaitingSegment(location_name=item.start_location_name, **common))
    if not segments:
        raise ValueError("An itinerary needs at least one segment.")

    return Itinerary(
        id=model.id,
        segments=tuple(segments),
        total_travel_time_minutes=model.total_travel_time_minutes,
        total_walking_distance_meters=model.total_walking_distance_meters,
        total_cost=model.total_cost,
        transfer_count=model.transfer_count,
        departure_time=model.departure_time,
        arrival_time=model.arrival_time,
        route_classification=model.route_type,
        confidence_score=model.confidence_score,
    )


def realtime_update_to_model(update: RealTimeUpdate) -> RealTimeUpdateModel:
    return RealTimeUpdateModel(
        route_id=update.route_id,
        bus_id=update.bus_id,
        current_location=to_point_model(update.current_location),
        delay_minutes=update.delay_minutes,
        last_updated=update.last_updated,
        status=update.status,
    )


def plan_trip_request(payload: TripPlanRequest) -> TripPlanResponse:
    options = plan_trip(
        to_geopoint(payload.origin),
        to_geopoint(payload.destination),
        payload.departure_time,
        preferences_from_request(payload),
    )
    return TripPlanResponse(options=[itinerary_to_model(option) for option in options])

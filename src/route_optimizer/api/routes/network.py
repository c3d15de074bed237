"""Transit network endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from ...models.domain import Bus, GeoPoint, RoutePath, Stop
from ...schemas.network import BusModel, RouteDetailModel, RouteModel, StopModel
from ...schemas.trips import GeoPointModel
from ...services.network import get_network
from ...services.planning.service import find_nearby_stops

router = APIRouter(prefix="/network", tags=["network"])


def _point(point: GeoPoint) -> GeoPointModel:
    return GeoPointModel(latitude=point.latitude, longitude=point.longitude)


def _stop_model(stop: Stop) -> StopModel:
    return StopModel(
        id=stop.id,
        name=stop.name,
        location=_point(stop.location),
        is_accessible=stop.is_accessible,
        is_active=stop.is_active,
        zone_type=stop.zone_type,
    )


def _route_fields(route: RoutePath) -> dict:
    return {
        "id": route.id,
        "name": route.name,
        "code": route.code,
        "is_active": route.is_active,
        "estimated_travel_time_minutes": route.estimated_travel_time_minutes,
        "operational_cost": route.operational_cost,
        "stop_ids": [stop.id for stop in route.stops],
        "path": [_point(point) for point in route.path],
    }


def _bus_model(bus: Bus) -> BusModel:
    return BusModel(
        id=bus.id,
        ref_number=bus.ref_number,
        capacity=bus.capacity,
        bus_type=bus.bus_type,
        is_active=bus.is_active,
        current_route_id=bus.current_route_id,
        current_location=_point(bus.current_location) if bus.current_location else None,
    )


@router.get("/stops", response_model=List[StopModel], status_code=status.HTTP_200_OK)
def list_stops(active_only: bool = Query(True)) -> List[StopModel]:
    stops = get_network().list_stops()
    return [_stop_model(stop) for stop in stops if stop.is_active or not active_only]


@router.get("/stops/nearby", response_model=List[StopModel], status_code=status.HTTP_200_OK)
def nearby_stops(
    latitude: float = Query(..., ge=-90.0, le=90.0),
    longitude: float = Query(..., ge=-180.0, le=180.0),
    radius_meters: float = Query(500.0, gt=0, le=5000),
) -> List[StopModel]:
    stops = find_nearby_stops(GeoPoint(latitude=latitude, longitude=longitude), radius_meters)
    return [_stop_model(stop) for stop in stops]


@router.get("/routes", response_model=List[RouteModel], status_code=status.HTTP_200_OK)
def list_routes(active_only: bool = Query(True)) -> List[RouteModel]:
    routes = get_network().list_routes()
    return [RouteModel(**_route_fields(route)) for route in routes if route.is_active or not active_only]


@router.get("/routes/{route_id}", response_model=RouteDetailModel, status_code=status.HTTP_200_OK)
def get_route(route_id: int) -> RouteDetailModel:
    network = get_network()
    route = network.get_route(route_id)
    if route is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Route {route_id} not found")
    return RouteDetailModel(
        **_route_fields(route),
        stops=[_stop_model(stop) for stop in route.stops],
        buses=[_bus_model(bus) for bus in network.buses_on_route(route_id)],
    )

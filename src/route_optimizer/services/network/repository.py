"""Network loader with database-first approach, falling back to a JSON snapshot."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from ...config import settings
from ...db.supabase import (
    BUSES_TABLE,
    ROUTE_STOPS_TABLE,
    ROUTES_TABLE,
    STOPS_TABLE,
    get_supabase_client,
)
from ...models.domain import Bus, GeoPoint, RoutePath, Stop
from .store import InMemoryTransitNetwork


def _optional_point(latitude: Any, longitude: Any) -> Optional[GeoPoint]:
    if latitude is None or longitude is None:
        return None
    return GeoPoint(latitude=float(latitude), longitude=float(longitude))


def stop_from_row(row: dict) -> Stop:
    return Stop(
        id=int(row["id"]),
        name=str(row.get("name") or f"Stop {row['id']}"),
        location=GeoPoint(latitude=float(row["latitude"]), longitude=float(row["longitude"])),
        is_accessible=bool(row.get("is_accessible", True)),
        is_active=bool(row.get("is_active", True)),
        zone_type=str(row.get("zone_type") or ""),
    )


def route_from_row(row: dict, stop_ids: Iterable[int], stops_by_id: dict[int, Stop]) -> RoutePath:
    stops: list[Stop] = []
    for stop_id in stop_ids:
        stop = stops_by_id.get(int(stop_id))
        if stop is None:
            logging.warning(f"Route {row.get('id')} references unknown stop {stop_id}, skipping it")
            continue
        stops.append(stop)
    path = tuple(GeoPoint(latitude=float(lat), longitude=float(lon)) for lat, lon in row.get("path") or ())
    return RoutePath(
        id=int(row["id"]),
        name=str(row.get("name") or f"Route {row['id']}"),
        code=str(row.get("code") or ""),
        stops=tuple(stops),
        estimated_travel_time_minutes=int(row.get("estimated_travel_time_minutes") or 0),
        operational_cost=float(row.get("operational_cost") or 0.0),
        is_active=bool(row.get("is_active", True)),
        path=path,
    )


def bus_from_row(row: dict) -> Bus:
    current_route_id = row.get("current_route_id")
    return Bus(
        id=int(row["id"]),
        ref_number=str(row.get("ref_number") or row["id"]),
        capacity=int(row.get("capacity") or 0),
        bus_type=str(row.get("bus_type") or "standard"),
        is_active=bool(row.get("is_active", True)),
        current_route_id=int(current_route_id) if current_route_id is not None else None,
        current_location=_optional_point(row.get("latitude"), row.get("longitude")),
    )


def _build_network(stop_rows: list[dict], route_rows: list[tuple[dict, list[int]]], bus_rows: list[dict]) -> InMemoryTransitNetwork:
    stops: list[Stop] = []
    for row in stop_rows:
        try:
            stops.append(stop_from_row(row))
        except (KeyError, ValueError, TypeError) as e:
            logging.warning(f"Skipping invalid stop row: {e}")
    stops_by_id = {stop.id: stop for stop in stops}

    routes: list[RoutePath] = []
    for row, stop_ids in route_rows:
        try:
            routes.append(route_from_row(row, stop_ids, stops_by_id))
        except (KeyError, ValueError, TypeError) as e:
            logging.warning(f"Skipping invalid route row: {e}")

    buses: list[Bus] = []
    for row in bus_rows:
        try:
            buses.append(bus_from_row(row))
        except (KeyError, ValueError, TypeError) as e:
            logging.warning(f"Skipping invalid bus row: {e}")

    return InMemoryTransitNetwork(stops, routes, buses, max_nearby_stops=settings.max_nearby_stops)


def _load_network_from_database() -> InMemoryTransitNetwork | None:
    """Load the network from Supabase. Returns None if database not available or empty."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    try:
        stop_rows = supabase.table(STOPS_TABLE).select("*").execute().data or []
        if not stop_rows:
            return None
        route_rows = supabase.table(ROUTES_TABLE).select("*").execute().data or []
        link_rows = supabase.table(ROUTE_STOPS_TABLE).select("route_id,stop_id,sequence").execute().data or []
        bus_rows = supabase.table(BUSES_TABLE).select("*").execute().data or []
    except Exception as e:
        logging.warning(f"Database query failed, falling back to network file: {e}")
        return None

    links: dict[int, list[tuple[int, int]]] = {}
    for link in link_rows:
        links.setdefault(int(link["route_id"]), []).append((int(link.get("sequence") or 0), int(link["stop_id"])))
    routes_with_stops = [
        (row, [stop_id for _, stop_id in sorted(links.get(int(row["id"]), []))])
        for row in route_rows
    ]
    network = _build_network(stop_rows, routes_with_stops, bus_rows)
    logging.info(
        f"Loaded network from database: {network.count_all_stops()} stops, "
        f"{len(network.routes)} routes, {len(network.buses)} buses"
    )
    return network


def load_network_from_file(source: Path | None = None) -> InMemoryTransitNetwork:
    """Load the network from a JSON snapshot."""
    network_path = source or settings.network_file
    if not network_path.exists():
        raise FileNotFoundError(f"Network file not found: {network_path}")

    with network_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Network file '{network_path}' must contain a JSON object.")

    route_rows = [(row, list(row.get("stop_ids") or [])) for row in payload.get("routes", [])]
    return _build_network(payload.get("stops", []), route_rows, payload.get("buses", []))


@functools.lru_cache(maxsize=1)
def get_network() -> InMemoryTransitNetwork:
    """Get the network from the database first, falling back to the JSON snapshot.

    When neither source is available an empty network is returned so the API
    stays up and planning calls return no options.
    """
    db_network = _load_network_from_database()
    if db_network is not None:
        return db_network

    try:
        return load_network_from_file()
    except FileNotFoundError as e:
        logging.warning(f"{e}. Starting with an empty transit network.")
        return InMemoryTransitNetwork(max_nearby_stops=settings.max_nearby_stops)


def clear_network_cache() -> None:
    get_network.cache_clear()

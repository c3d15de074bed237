"""Supabase access for the transit network and trip history tables."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

# bus_stops(id, name, latitude, longitude, is_accessible, is_active, zone_type)
STOPS_TABLE = "bus_stops"
# bus_routes(id, name, code, estimated_travel_time_minutes, operational_cost, is_active, path)
ROUTES_TABLE = "bus_routes"
# route_stops(route_id, stop_id, sequence)
ROUTE_STOPS_TABLE = "route_stops"
# buses(id, ref_number, capacity, bus_type, is_active, current_route_id, latitude, longitude)
BUSES_TABLE = "buses"
# trip_requests(user_id, origin_lat, origin_lon, destination_lat, destination_lon,
#               requested_time, preferences, selected_route_id, created_at)
TRIP_REQUESTS_TABLE = "trip_requests"


@lru_cache()
def get_supabase_client() -> Client | None:
    """Shared client, or None when ROUTE_OPT_SUPABASE_URL/KEY are not set.

    Creating the client does not open a connection, so callers still have to
    handle query failures.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.info("Supabase not configured, using local network file and trip history")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        return None

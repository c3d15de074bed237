"""Trip request persistence: Supabase first, JSON-lines file when not configured."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from ..db.supabase import TRIP_REQUESTS_TABLE, get_supabase_client
from ..models.domain import GeoPoint, TripRequestRecord
from .filesystem import FileStorage

HISTORY_FILE = "trip_requests.jsonl"


def _record_to_row(record: TripRequestRecord) -> dict:
    return {
        "user_id": record.user_id,
        "origin_lat": record.origin.latitude,
        "origin_lon": record.origin.longitude,
        "destination_lat": record.destination.latitude,
        "destination_lon": record.destination.longitude,
        "requested_time": record.requested_time.isoformat(),
        "preferences": record.preferences,
        "selected_route_id": record.selected_route_id,
        "created_at": (record.created_at or datetime.now(timezone.utc)).isoformat(),
    }


def _row_to_record(row: dict) -> TripRequestRecord:
    preferences = row.get("preferences") or {}
    if isinstance(preferences, str):
        preferences = json.loads(preferences)
    created_at = row.get("created_at")
    selected_route_id = row.get("selected_route_id")
    return TripRequestRecord(
        user_id=int(row["user_id"]),
        origin=GeoPoint(latitude=float(row["origin_lat"]), longitude=float(row["origin_lon"])),
        destination=GeoPoint(latitude=float(row["destination_lat"]), longitude=float(row["destination_lon"])),
        requested_time=datetime.fromisoformat(str(row["requested_time"])),
        preferences=preferences,
        selected_route_id=int(selected_route_id) if selected_route_id is not None else None,
        created_at=datetime.fromisoformat(str(created_at)) if created_at else None,
    )


def _history_path(storage: FileStorage) -> Path:
    return storage.root / HISTORY_FILE


def _created_at_key(record: TripRequestRecord) -> datetime:
    created = record.created_at or datetime.min.replace(tzinfo=timezone.utc)
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


def save_trip_request(record: TripRequestRecord, storage: FileStorage | None = None) -> bool:
    """Store a trip request. Returns False when the write fails."""
    if record.created_at is None:
        record.created_at = datetime.now(timezone.utc)
    row = _record_to_row(record)

    supabase = get_supabase_client()
    try:
        if supabase:
            supabase.table(TRIP_REQUESTS_TABLE).insert(row).execute()
        else:
            storage = storage or FileStorage()
            storage.append_jsonl(_history_path(storage), row)
    except Exception as e:
        logging.error(f"Error saving trip request for user {record.user_id}: {e}")
        return False

    logging.info(f"Saved trip request for user {record.user_id}")
    return True


def get_user_trip_history(user_id: int, page_size: int = 20, storage: FileStorage | None = None) -> list[TripRequestRecord]:
    """Most recent trip requests of a user, newest first."""
    supabase = get_supabase_client()
    try:
        if supabase:
            response = (
                supabase.table(TRIP_REQUESTS_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .limit(page_size)
                .execute()
            )
            return [_row_to_record(row) for row in (response.data or [])]

        storage = storage or FileStorage()
        rows = storage.read_jsonl(_history_path(storage))
    except Exception as e:
        logging.error(f"Error getting trip history for user {user_id}: {e}")
        return []

    records = [_row_to_record(row) for row in rows if int(row.get("user_id", -1)) == user_id]
    records.sort(key=_created_at_key, reverse=True)
    return records[:page_size]


def count_requests_for_route(route_id: int, storage: FileStorage | None = None) -> int:
    """Number of saved requests whose selected route is ``route_id``."""
    supabase = get_supabase_client()
    try:
        if supabase:
            response = (
                supabase.table(TRIP_REQUESTS_TABLE)
                .select("id", count="exact")
                .eq("selected_route_id", route_id)
                .execute()
            )
            return int(response.count or 0)

        storage = storage or FileStorage()
        rows = storage.read_jsonl(_history_path(storage))
    except Exception as e:
        logging.warning(f"Failed to count trip requests for route {route_id}: {e}")
        return 0
    return sum(1 for row in rows if row.get("selected_route_id") == route_id)

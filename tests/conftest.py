from pathlib import Path

import pytest

from route_optimizer.config import settings
from route_optimizer.models.domain import Bus, GeoPoint, RoutePath, Stop
from route_optimizer.persistence import trips as trip_store
from route_optimizer.services.network import InMemoryTransitNetwork, clear_network_cache
from route_optimizer.services.network import repository
from route_optimizer.services.realtime import delay_board

# Four stops roughly 5 km apart around central Riyadh.
STOP_A = Stop(id=1, name="King Fahd Rd", location=GeoPoint(24.700, 46.700))
STOP_B = Stop(id=2, name="Olaya St", location=GeoPoint(24.750, 46.700))
STOP_T = Stop(id=3, name="Transfer Hub", location=GeoPoint(24.700, 46.750))
STOP_C = Stop(id=4, name="Exit 5", location=GeoPoint(24.750, 46.750))


def direct_network() -> InMemoryTransitNetwork:
    route = RoutePath(id=10, name="Line 10", stops=(STOP_A, STOP_B), estimated_travel_time_minutes=30)
    bus = Bus(id=100, ref_number="B-100", current_route_id=10, current_location=GeoPoint(24.72, 46.70))
    return InMemoryTransitNetwork([STOP_A, STOP_B, STOP_T, STOP_C], [route], [bus])


def transfer_network() -> InMemoryTransitNetwork:
    first = RoutePath(id=10, name="Line 10", stops=(STOP_A, STOP_T), estimated_travel_time_minutes=30)
    second = RoutePath(id=20, name="Line 20", stops=(STOP_T, STOP_C), estimated_travel_time_minutes=30)
    return InMemoryTransitNetwork([STOP_A, STOP_B, STOP_T, STOP_C], [first, second])


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "data_root", tmp_path)
    monkeypatch.setattr(settings, "network_file", tmp_path / "network.json")
    monkeypatch.setattr(repository, "get_supabase_client", lambda: None)
    monkeypatch.setattr(trip_store, "get_supabase_client", lambda: None)
    clear_network_cache()
    delay_board.clear()
    yield
    clear_network_cache()
    delay_board.clear()

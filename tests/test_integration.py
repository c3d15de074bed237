import json

import pytest
from fastapi.testclient import TestClient

from route_optimizer.config import settings
from route_optimizer.db import supabase as supabase_module
from route_optimizer.main import create_app
from route_optimizer.schemas.trips import TripPlanRequest

ORIGIN = {"latitude": 24.700, "longitude": 46.700}
DESTINATION = {"latitude": 24.750, "longitude": 46.700}


def _network_payload() -> dict:
    return {
        "stops": [
            {"id": 1, "name": "King Fahd Rd", "latitude": 24.700, "longitude": 46.700},
            {"id": 2, "name": "Olaya St", "latitude": 24.750, "longitude": 46.700},
            {"id": 3, "name": "Transfer Hub", "latitude": 24.700, "longitude": 46.750},
            {"id": 4, "name": "Exit 5", "latitude": 24.750, "longitude": 46.750, "is_active": False},
        ],
        "routes": [
            {"id": 10, "name": "Line 10", "code": "L10", "estimated_travel_time_minutes": 30, "stop_ids": [1, 2]},
        ],
        "buses": [
            {"id": 100, "ref_number": "B-100", "current_route_id": 10, "latitude": 24.72, "longitude": 46.70},
        ],
    }


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    settings.network_file.write_text(json.dumps(_network_payload()), encoding="utf-8")
    monkeypatch.setattr(supabase_module, "get_supabase_client", lambda: None)
    monkeypatch.setattr(settings, "solver_time_limit_seconds", 1)
    return TestClient(create_app())


def _plan_payload(**overrides) -> dict:
    payload = {"origin": ORIGIN, "destination": DESTINATION, "departure_time": "2024-05-01T08:00:00"}
    payload.update(overrides)
    return TripPlanRequest(**payload).model_dump(mode="json")


def test_root_and_health(api_client: TestClient):
    assert api_client.get("/").json()["status"] == "running"
    assert api_client.get("/api/health").json() == {"status": "ok"}

    database = api_client.get("/api/health/database").json()
    assert database["configured"] is False
    assert database["stops_count"] == 4


def test_network_endpoints(api_client: TestClient):
    stops = api_client.get("/api/network/stops").json()
    assert [stop["id"] for stop in stops] == [1, 2, 3]
    assert len(api_client.get("/api/network/stops", params={"active_only": False}).json()) == 4

    nearby = api_client.get("/api/network/stops/nearby", params={"latitude": 24.7001, "longitude": 46.7, "radius_meters": 300})
    assert [stop["id"] for stop in nearby.json()] == [1]

    routes = api_client.get("/api/network/routes").json()
    assert routes[0]["code"] == "L10"
    assert routes[0]["stop_ids"] == [1, 2]

    detail = api_client.get("/api/network/routes/10").json()
    assert [stop["name"] for stop in detail["stops"]] == ["King Fahd Rd", "Olaya St"]
    assert detail["buses"][0]["ref_number"] == "B-100"

    assert api_client.get("/api/network/routes/99").status_code == 404


def test_plan_trip_endpoint(api_client: TestClient):
    response = api_client.post("/api/trips/plan", json=_plan_payload())

    assert response.status_code == 200
    options = response.json()["options"]
    assert len(options) == 1
    option = options[0]
    assert option["route_type"] == "direct"
    assert option["transfer_count"] == 0
    assert [segment["type"] for segment in option["segments"]] == ["walking", "bus", "walking"]
    assert option["segments"][1]["route_id"] == 10
    assert option["total_travel_time_minutes"] == 20


def test_plan_trip_rejects_invalid_coordinates(api_client: TestClient):
    payload = {"origin": {"latitude": 123.0, "longitude": 46.7}, "destination": DESTINATION, "departure_time": "2024-05-01T08:00:00"}

    assert api_client.post("/api/trips/plan", json=payload).status_code == 422


def test_optimal_trip_endpoint(api_client: TestClient):
    response = api_client.post("/api/trips/optimal", json=_plan_payload())
    assert response.status_code == 200
    assert response.json()["segments"][1]["route_name"] == "Line 10"

    far_away = _plan_payload(origin={"latitude": 26.0, "longitude": 50.0})
    assert api_client.post("/api/trips/optimal", json=far_away).status_code == 404


def test_reported_delay_adjusts_planned_trip(api_client: TestClient):
    option = api_client.post("/api/trips/plan", json=_plan_payload()).json()["options"][0]

    notification = api_client.post("/api/realtime/route-delay", json={"route_id": 10, "delay_minutes": 6, "reason": "traffic"})
    assert notification.json() == {"event": "RouteDelayUpdate", "delivered": 0}

    updates = api_client.get("/api/trips/realtime/10").json()
    assert updates[0]["status"] == "delayed"
    assert updates[0]["delay_minutes"] == 6

    adjusted = api_client.post("/api/trips/realtime-adjust", json=option).json()
    assert adjusted["total_travel_time_minutes"] == option["total_travel_time_minutes"] + 6
    assert adjusted["segments"][1]["duration_minutes"] == option["segments"][1]["duration_minutes"] + 6


def test_trip_history_endpoints(api_client: TestClient):
    saved = api_client.post(
        "/api/trips/history",
        json={"user_id": 7, "request": _plan_payload(), "selected_route_id": 10},
    )
    assert saved.json() == {"success": True}

    history = api_client.get("/api/trips/history/7").json()
    assert len(history) == 1
    assert history[0]["selected_route_id"] == 10
    assert history[0]["origin"] == ORIGIN
    assert api_client.get("/api/trips/history/8").json() == []


def test_optimize_endpoint(api_client: TestClient):
    payload = {
        "required_stops": [
            {"latitude": 24.72, "longitude": 46.70},
            {"latitude": 24.70, "longitude": 46.71},
            {"latitude": 24.74, "longitude": 46.70},
        ],
        "start_point": ORIGIN,
    }

    response = api_client.post("/api/optimization/optimize", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["optimized_stops"][0] == ORIGIN
    assert len(body["optimized_stops"]) == 4
    assert body["metadata"]["stop_count"] == 3


def test_alternatives_endpoint(api_client: TestClient):
    payload = {"required_stops": [ORIGIN, DESTINATION, {"latitude": 24.72, "longitude": 46.71}]}

    response = api_client.post("/api/optimization/alternatives", json=payload)

    assert response.status_code == 200
    assert {item["optimization_goal"] for item in response.json()} == {
        "minimize_time",
        "minimize_distance",
        "maximize_coverage",
    }


def test_order_stops_endpoint(api_client: TestClient):
    response = api_client.post("/api/optimization/order-stops", json={"stops": [DESTINATION, ORIGIN]})

    assert response.json()["stops"] == [DESTINATION, ORIGIN]


def test_route_analysis_endpoint(api_client: TestClient):
    response = api_client.get("/api/optimization/routes/10/analysis")

    assert response.status_code == 200
    body = response.json()
    assert body["route_id"] == 10
    assert body["average_passengers_per_day"] == 50
    assert "Route may benefit from additional stops to improve coverage" in body["improvement_suggestions"]

    assert api_client.get("/api/optimization/routes/99/analysis").status_code == 404


def test_stop_locations_endpoint(api_client: TestClient):
    payload = {
        "service_area": [[24.60, 46.60], [24.60, 46.80], [24.80, 46.80], [24.80, 46.60]],
        "max_stops": 2,
    }

    response = api_client.post("/api/optimization/stop-locations", json=payload)

    assert response.status_code == 200
    stops = response.json()["stops"]
    assert len(stops) == 2
    assert all(stop["zone_type"] == "proposed" for stop in stops)

    too_small = {"service_area": [[24.60, 46.60], [24.60, 46.80]], "max_stops": 2}
    assert api_client.post("/api/optimization/stop-locations", json=too_small).status_code == 422


def test_route_updates_websocket(api_client: TestClient):
    with api_client.websocket_connect("/api/ws/route-updates?user_id=u1") as websocket:
        websocket.send_json({"action": "subscribe", "route_id": 10})
        confirmation = websocket.receive_json()
        assert confirmation["event"] == "RouteSubscriptionConfirmed"
        assert confirmation["data"] == 10

        websocket.send_text("not json")
        assert websocket.receive_json()["event"] == "Error"

        websocket.send_bytes(b"\x00\x01")
        error = websocket.receive_json()
        assert error["event"] == "Error"
        assert error["data"]["message"] == "Messages must be JSON objects"

        websocket.send_json({"action": "unsubscribe", "route_id": 10})
        assert websocket.receive_json()["event"] == "RouteUnsubscriptionConfirmed"


def test_system_alert_endpoint(api_client: TestClient):
    response = api_client.post("/api/realtime/system-alert", json={"message": "Maintenance tonight"})

    assert response.json() == {"event": "SystemAlert", "delivered": 0}

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from route_optimizer.models.domain import GeoPoint, TripRequestRecord
from route_optimizer.persistence import trips as trip_store
from route_optimizer.persistence.filesystem import FileStorage


def _record(user_id: int, minutes_ago: int, route_id: int | None = None) -> TripRequestRecord:
    return TripRequestRecord(
        user_id=user_id,
        origin=GeoPoint(24.70, 46.70),
        destination=GeoPoint(24.75, 46.70),
        requested_time=datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc),
        preferences={"route_type": "fastest"},
        selected_route_id=route_id,
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )


def test_file_storage_creates_run_directory(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="optimization_test")

    assert run_dir.exists()
    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path / "outputs"


def test_run_directory_rejects_prefix_outside_outputs(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path / "data")

    with pytest.raises(ValueError):
        storage.make_run_directory(prefix="../../elsewhere")

    assert not (tmp_path / "elsewhere").exists()


def test_reading_history_does_not_create_output_directory(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)

    assert trip_store.get_user_trip_history(7, storage=storage) == []
    assert trip_store.count_requests_for_route(10, storage=storage) == 0
    assert not (tmp_path / "outputs").exists()


def test_file_storage_writes_json_and_csv(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="optimization_test")

    summary_path = run_dir / "summary.json"
    stops_path = run_dir / "stops.csv"

    storage.write_json(summary_path, {"route": "Line 10"})
    storage.write_csv(stops_path, "sequence,latitude\n1,24.7\n")

    assert summary_path.read_text(encoding="utf-8") == '{\n  "route": "Line 10"\n}'
    assert stops_path.read_text(encoding="utf-8") == "sequence,latitude\n1,24.7\n"


def test_file_storage_jsonl_round_trip(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    path = tmp_path / "events.jsonl"

    assert storage.read_jsonl(path) == []
    storage.append_jsonl(path, {"id": 1})
    storage.append_jsonl(path, {"id": 2})

    assert storage.read_jsonl(path) == [{"id": 1}, {"id": 2}]


def test_trip_history_newest_first(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    assert trip_store.save_trip_request(_record(1, minutes_ago=30), storage=storage)
    assert trip_store.save_trip_request(_record(1, minutes_ago=5, route_id=10), storage=storage)
    assert trip_store.save_trip_request(_record(2, minutes_ago=1), storage=storage)

    history = trip_store.get_user_trip_history(1, storage=storage)

    assert len(history) == 2
    assert history[0].selected_route_id == 10
    assert history[0].created_at > history[1].created_at
    assert history[0].preferences == {"route_type": "fastest"}
    assert history[0].origin == GeoPoint(24.70, 46.70)


def test_trip_history_page_size(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    for minutes in range(5):
        trip_store.save_trip_request(_record(3, minutes_ago=minutes), storage=storage)

    assert len(trip_store.get_user_trip_history(3, page_size=2, storage=storage)) == 2


def test_count_requests_for_route(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    trip_store.save_trip_request(_record(1, minutes_ago=3, route_id=10), storage=storage)
    trip_store.save_trip_request(_record(2, minutes_ago=2, route_id=10), storage=storage)
    trip_store.save_trip_request(_record(2, minutes_ago=1, route_id=20), storage=storage)

    assert trip_store.count_requests_for_route(10, storage=storage) == 2
    assert trip_store.count_requests_for_route(30, storage=storage) == 0


def test_save_trip_request_uses_supabase_when_configured(monkeypatch) -> None:
    inserted = []

    class FakeTable:
        def insert(self, row):
            inserted.append(row)
            return self

        def execute(self):
            return None

    class FakeClient:
        def table(self, name):
            assert name == "trip_requests"
            return FakeTable()

    monkeypatch.setattr(trip_store, "get_supabase_client", lambda: FakeClient())

    assert trip_store.save_trip_request(_record(4, minutes_ago=0, route_id=10))
    assert inserted[0]["user_id"] == 4
    assert inserted[0]["origin_lat"] == 24.70
    assert inserted[0]["selected_route_id"] == 10


def test_save_trip_request_reports_failure(monkeypatch) -> None:
    class BrokenClient:
        def table(self, name):
            raise RuntimeError("connection refused")

    monkeypatch.setattr(trip_store, "get_supabase_client", lambda: BrokenClient())

    assert trip_store.save_trip_request(_record(4, minutes_ago=0)) is False

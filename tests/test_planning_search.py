from datetime import datetime, timedelta

from route_optimizer.models.domain import GeoPoint
from route_optimizer.services.network import InMemoryTransitNetwork
from route_optimizer.services.planning.models import BusSegment, PlannerConfig, PreferenceProfile, WaitingSegment, WalkingSegment
from route_optimizer.services.planning.search import ItinerarySearch
from route_optimizer.services.planning.service import plan_trip

from conftest import STOP_A, STOP_B, STOP_C, direct_network, transfer_network

DEPARTURE = datetime(2024, 5, 1, 8, 0)


def test_direct_trip_has_walk_bus_walk():
    search = ItinerarySearch(direct_network(), PlannerConfig())

    options = search.search(STOP_A.location, STOP_B.location, DEPARTURE, PreferenceProfile())

    assert len(options) == 1
    option = options[0]
    assert [type(segment) for segment in option.segments] == [WalkingSegment, BusSegment, WalkingSegment]
    assert option.transfer_count == 0
    assert option.route_classification == "direct"
    assert option.total_travel_time_minutes == 20
    assert option.total_cost == 2.5
    assert option.arrival_time == DEPARTURE + timedelta(minutes=20)
    assert option.confidence_score == 1.0


def test_bus_segment_timing():
    search = ItinerarySearch(direct_network(), PlannerConfig())

    option = search.search(STOP_A.location, STOP_B.location, DEPARTURE, PreferenceProfile())[0]
    bus = option.segments[1]

    assert bus.route_id == 10
    assert bus.bus_id == 100
    assert bus.start_time == DEPARTURE + timedelta(minutes=5)
    assert bus.end_time == DEPARTURE + timedelta(minutes=20)
    assert bus.duration_minutes == 20
    assert bus.start_location_name == "King Fahd Rd"
    assert bus.end_location_name == "Olaya St"


def test_transfer_trip_has_five_segments():
    search = ItinerarySearch(transfer_network(), PlannerConfig())

    options = search.search(STOP_A.location, STOP_C.location, DEPARTURE, PreferenceProfile())

    assert len(options) == 1
    option = options[0]
    assert [segment.kind for segment in option.segments] == ["walking", "bus", "waiting", "bus", "walking"]
    assert option.transfer_count == 1
    assert option.route_classification == "transfer"
    assert option.total_travel_time_minutes == 45
    assert option.total_cost == 5.0
    assert option.arrival_time == DEPARTURE + timedelta(minutes=45)
    assert option.confidence_score == 0.9
    assert [segment.route_id for segment in option.bus_segments] == [10, 20]


def test_walking_minutes_round_up():
    search = ItinerarySearch(InMemoryTransitNetwork(), PlannerConfig())

    segment = search.walking_segment(GeoPoint(24.700, 46.700), GeoPoint(24.701, 46.700), DEPARTURE, "Walk")

    # 111 m at 1.4 m/s is just over a minute
    assert segment.duration_minutes == 2
    assert segment.end_time == DEPARTURE + timedelta(minutes=2)


def test_no_nearby_stops_yields_nothing():
    search = ItinerarySearch(direct_network(), PlannerConfig())

    options = search.search(GeoPoint(25.5, 47.5), STOP_B.location, DEPARTURE, PreferenceProfile())

    assert options == []


def test_options_over_walking_limit_are_discarded():
    search = ItinerarySearch(direct_network(), PlannerConfig())
    origin = GeoPoint(24.703, 46.700)

    assert search.search(origin, STOP_B.location, DEPARTURE, PreferenceProfile(max_walking_distance_meters=800))
    assert search.search(origin, STOP_B.location, DEPARTURE, PreferenceProfile(max_walking_distance_meters=200)) == []


def test_plan_trip_caps_options():
    options = plan_trip(
        STOP_A.location,
        STOP_B.location,
        DEPARTURE,
        PreferenceProfile(),
        store=direct_network(),
        config=PlannerConfig(max_trip_options=1),
    )

    assert len(options) == 1


def test_plan_trip_returns_empty_on_store_failure():
    class BrokenStore:
        def find_stops_near(self, point, radius_meters):
            raise RuntimeError("database unavailable")

    options = plan_trip(STOP_A.location, STOP_B.location, DEPARTURE, PreferenceProfile(), store=BrokenStore())

    assert options == []


def test_waiting_segment_stays_at_stop():
    search = ItinerarySearch(transfer_network(), PlannerConfig(transfer_wait_minutes=7))

    wait = search.waiting_segment(STOP_A, DEPARTURE)

    assert isinstance(wait, WaitingSegment)
    assert wait.start_location == wait.end_location == STOP_A.location
    assert wait.duration_minutes == 7
    assert wait.distance_meters == 0.0


def test_plan_trip_direct_with_default_config():
    options = plan_trip(STOP_A.location, STOP_B.location, DEPARTURE, PreferenceProfile(), store=direct_network())

    assert len(options) == 1
    assert len(options[0].segments) == 3
    assert options[0].transfer_count == 0

"""Itinerary filtering, ordering and confidence scoring."""

from __future__ import annotations

from typing import Callable, Sequence

from .models import (
    BusSegment,
    Itinerary,
    PlannerConfig,
    PreferenceProfile,
    RouteClassification,
    Segment,
    WaitingSegment,
    WalkingSegment,
)

MIN_CONFIDENCE = 0.5
TRANSFER_PENALTY = 0.1
LONG_WALK_PENALTY = 0.1


def confidence_score(segments: Sequence[Segment], config: PlannerConfig | None = None) -> float:
    """Heuristic reliability score in [0.5, 1.0].

    Each transfer costs 0.1 and a total walk longer than the configured
    threshold costs another 0.1. This is not a probability.
    """
    config = config or PlannerConfig()
    score = 1.0
    transfers = sum(1 for segment in segments if isinstance(segment, WaitingSegment))
    score -= transfers * TRANSFER_PENALTY

    walking_minutes = sum(segment.duration_minutes for segment in segments if isinstance(segment, WalkingSegment))
    if walking_minutes > config.long_walk_threshold_minutes:
        score -= LONG_WALK_PENALTY

    return min(1.0, max(MIN_CONFIDENCE, score))


def classify_route(segments: Sequence[Segment]) -> RouteClassification:
    bus_count = sum(1 for segment in segments if isinstance(segment, BusSegment))
    if bus_count == 0:
        return "walking"
    if bus_count == 1:
        return "direct"
    return "transfer"


def is_accessible(itinerary: Itinerary) -> bool:
    # Always passes: stop and bus accessibility flags are not consulted yet.
    return True


_SORT_KEYS: dict[str, Callable[[Itinerary], tuple]] = {
    "fastest": lambda option: (option.total_travel_time_minutes,),
    "cheapest": lambda option: (option.total_cost,),
    "least_transfers": lambda option: (option.transfer_count, option.total_travel_time_minutes),
}


def rank_itineraries(itineraries: Sequence[Itinerary], preferences: PreferenceProfile) -> list[Itinerary]:
    """Drop options that violate the preferences and order the rest by objective.

    Unknown objectives fall back to ``fastest``. The sort is stable, so
    ranking an already ranked list keeps its order.
    """
    filtered = [
        option
        for option in itineraries
        if option.total_walking_distance_meters <= preferences.max_walking_distance_meters
        and (not preferences.accessibility_required or is_accessible(option))
    ]
    sort_key = _SORT_KEYS.get(preferences.objective, _SORT_KEYS["fastest"])
    return sorted(filtered, key=sort_key)

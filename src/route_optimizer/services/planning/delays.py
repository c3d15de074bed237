"""Real-time delay adjustment of planned itineraries."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import Callable

from .models import BusSegment, Itinerary, Segment


def apply_delays(itinerary: Itinerary, delay_for_route: Callable[[int], int]) -> Itinerary:
    """Return a copy of ``itinerary`` with reported bus delays applied.

    A delayed bus segment starts later and lasts longer by the delay; every
    later segment shifts by the accumulated delay. Totals and arrival are
    recomputed, the original itinerary is left untouched.
    """
    offset = 0
    segments: list[Segment] = []
    for segment in itinerary.segments:
        delay = delay_for_route(segment.route_id) if isinstance(segment, BusSegment) else 0
        delay = max(0, delay)
        if offset == 0 and delay == 0:
            segments.append(segment)
            continue
        shifted = replace(
            segment,
            start_time=segment.start_time + timedelta(minutes=offset + delay),
            end_time=segment.end_time + timedelta(minutes=offset + delay),
            duration_minutes=segment.duration_minutes + delay,
        )
        segments.append(shifted)
        offset += delay

    if offset == 0:
        return itinerary

    total_minutes = sum(segment.duration_minutes for segment in segments)
    return replace(
        itinerary,
        segments=tuple(segments),
        total_travel_time_minutes=total_minutes,
        arrival_time=itinerary.departure_time + timedelta(minutes=total_minutes),
    )

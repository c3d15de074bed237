"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import LineString, Point, Polygon

from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0
# Fixed metres-per-degree approximation, only valid at temperate latitudes.
METERS_PER_DEGREE = 111000.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    return distance_km(a, b) * 1000.0


def to_shapely(point: GeoPoint) -> Point:
    """Shapely geometries use (x, y) = (lon, lat)."""
    return Point(point.longitude, point.latitude)


def meters_to_degrees(radius_meters: float) -> float:
    return radius_meters / METERS_PER_DEGREE


def buffer_point(point: GeoPoint, radius_meters: float) -> Polygon:
    """Return a circular search region around ``point``.

    The radius is converted with a latitude-independent approximation, so the
    region is slightly elliptical on the ground away from the equator.
    """

    return to_shapely(point).buffer(meters_to_degrees(radius_meters))


def buffer_path(points: Sequence[GeoPoint], radius_meters: float) -> Polygon:
    """Return the corridor of ``radius_meters`` around a path."""

    if not points:
        raise ValueError("Cannot buffer an empty path.")
    if len(points) == 1:
        return buffer_point(points[0], radius_meters)
    line = LineString([point.as_lon_lat() for point in points])
    return line.buffer(meters_to_degrees(radius_meters))


def polygon_from_coordinates(coordinates: Sequence[tuple[float, float]]) -> Polygon:
    """Build a polygon from (lat, lon) pairs."""

    if len(coordinates) < 3:
        raise ValueError("Polygon must have at least 3 coordinates")
    return Polygon([(lon, lat) for lat, lon in coordinates])

"""
modules/tool_usage/distance_tool.py
-------------------------------------
Pure geometry helpers used across planning.

  distance_meters()          — great-circle (Haversine) distance
  estimate_travel_minutes()  — speed-table estimate; the guaranteed fallback
                               when routing is unavailable
  bounding_box()             — lat/lng box around a centre (search restriction)
  offset_coordinate()        — planar degree offset (small radii only)

No external HTTP calls are made.

Config knob (config.py):
  MODE_PROFILES[mode]["speed_kmh"] -- fallback speed per transport mode
"""

from __future__ import annotations
import math

import config
from schemas.itinerary import Coordinate, TransportMode

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

_EARTH_RADIUS_M = 6_371_000.0
_METERS_PER_DEGREE_LAT = 111_000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in metres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * _EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)


def speed_kmh(mode: TransportMode | str) -> float:
    """Fallback speed for *mode*; unknown modes get walking speed."""
    key = mode.value if isinstance(mode, TransportMode) else str(mode)
    profile = config.MODE_PROFILES.get(key, config.MODE_PROFILES["walking"])
    return profile["speed_kmh"]


def estimate_travel_minutes(a: Coordinate, b: Coordinate, mode: TransportMode | str) -> int:
    """
    ceil(km / speed_kmh * 60).  Never raises and never blocks; this is what
    every routing failure degrades to.
    """
    km = distance_meters(a, b) / 1000.0
    return int(math.ceil(km / speed_kmh(mode) * 60.0))


def bounding_box(center: Coordinate, radius_m: float) -> tuple[float, float, float, float]:
    """Return (west, south, east, north) roughly *radius_m* around *center*."""
    lat_delta = radius_m / _METERS_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(center.latitude)), 1e-6)
    lng_delta = radius_m / (_METERS_PER_DEGREE_LAT * cos_lat)
    return (
        max(-180.0, center.longitude - lng_delta),
        max(-90.0, center.latitude - lat_delta),
        min(180.0, center.longitude + lng_delta),
        min(90.0, center.latitude + lat_delta),
    )


def offset_coordinate(center: Coordinate, d_lat: float, d_lng: float) -> Coordinate:
    """
    Shift *center* by raw degree deltas (planar approximation, not geodesic).
    Latitude is clamped to the poles, longitude wrapped into [-180, 180].
    """
    lat = max(-90.0, min(90.0, center.latitude + d_lat))
    lng = center.longitude + d_lng
    if lng > 180.0 or lng < -180.0:
        lng = ((lng + 180.0) % 360.0) - 180.0
    return Coordinate(lat, lng)


def format_duration(minutes: int) -> str:
    """45 -> "45 min", 65 -> "1h 5m"."""
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60}h {minutes % 60}m"

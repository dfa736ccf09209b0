from __future__ import annotations

import math

import pytest

from modules.tool_usage.distance_tool import (
    bounding_box,
    distance_meters,
    estimate_travel_minutes,
    format_duration,
    offset_coordinate,
    speed_kmh,
)
from schemas.itinerary import Coordinate, TransportMode

PARIS = Coordinate(48.8566, 2.3522)
LONDON = Coordinate(51.5074, -0.1278)


def test_distance_to_self_is_zero():
    assert distance_meters(PARIS, PARIS) == 0.0


def test_distance_is_symmetric():
    assert distance_meters(PARIS, LONDON) == pytest.approx(distance_meters(LONDON, PARIS))


def test_paris_london_distance():
    assert 340_000 < distance_meters(PARIS, LONDON) < 347_000


def test_antipodal_points_do_not_blow_up():
    d = distance_meters(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0))
    assert d == pytest.approx(math.pi * 6_371_000, rel=1e-9)


@pytest.mark.parametrize(
    "mode, expected",
    [
        # 0.01° of latitude ≈ 1112 m
        (TransportMode.walking, 14),   # 13.3 min
        (TransportMode.transit, 4),    # 3.3 min
        (TransportMode.driving, 3),    # 2.2 min
    ],
)
def test_estimate_rounds_up(mode, expected):
    b = Coordinate(PARIS.latitude + 0.01, PARIS.longitude)
    assert estimate_travel_minutes(PARIS, b, mode) == expected


def test_estimate_same_point_is_zero():
    assert estimate_travel_minutes(PARIS, PARIS, "walking") == 0


def test_speed_table():
    assert speed_kmh(TransportMode.walking) == 5.0
    assert speed_kmh("transit") == 20.0
    assert speed_kmh(TransportMode.driving) == 30.0
    assert speed_kmh("hoverboard") == 5.0


def test_bounding_box_contains_center_and_scales_with_radius():
    west, south, east, north = bounding_box(PARIS, 2000)
    assert west < PARIS.longitude < east
    assert south < PARIS.latitude < north
    assert north - south == pytest.approx(2 * 2000 / 111_000)
    # longitude span widens away from the equator
    assert (east - west) > (north - south)


def test_offset_coordinate_wraps_longitude_and_clamps_latitude():
    c = offset_coordinate(Coordinate(89.9, 179.9), 0.5, 0.2)
    assert c.latitude == 90.0
    assert c.longitude == pytest.approx(-179.9)


@pytest.mark.parametrize(
    "minutes, text",
    [(0, "0 min"), (45, "45 min"), (60, "1h 0m"), (65, "1h 5m"), (150, "2h 30m")],
)
def test_format_duration(minutes, text):
    assert format_duration(minutes) == text

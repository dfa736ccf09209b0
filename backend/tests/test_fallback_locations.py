from __future__ import annotations

import pytest

from modules.planning.fallback_locations import FallbackLocationGenerator
from modules.tool_usage.distance_tool import distance_meters
from schemas.itinerary import Coordinate

START = Coordinate(28.6139, 77.2090)


@pytest.mark.parametrize("hours, count", [(1, 2), (2.5, 3), (5, 4), (8, 5)])
def test_count_follows_target_stop_count(hours, count):
    assert len(FallbackLocationGenerator().generate(START, "Delhi", hours, "walking")) == count


def test_places_are_synthetic_and_named_after_city():
    places = FallbackLocationGenerator().generate(START, "Delhi", 3, "transit")
    assert [p.id for p in places] == ["synthetic-0", "synthetic-1", "synthetic-2"]
    assert all(p.is_synthetic for p in places)
    assert all("Delhi" in p.name and "Delhi" in p.description for p in places)
    assert len({p.name for p in places}) == len(places)


def test_first_stop_is_due_north_at_one_spacing():
    first = FallbackLocationGenerator().generate(START, "Delhi", 1, "walking")[0]
    assert first.coordinate.latitude == pytest.approx(START.latitude + 0.003)
    assert first.coordinate.longitude == pytest.approx(START.longitude)


def test_rings_grow_outward():
    places = FallbackLocationGenerator().generate(START, "Delhi", 8, "driving")
    dists = [distance_meters(START, p.coordinate) for p in places]
    assert dists == sorted(dists)


def test_faster_modes_spread_wider():
    gen = FallbackLocationGenerator()
    walk = gen.generate(START, "Delhi", 2, "walking")[0]
    drive = gen.generate(START, "Delhi", 2, "car/taxi")[0]
    assert distance_meters(START, drive.coordinate) > distance_meters(START, walk.coordinate)


def test_output_is_deterministic():
    gen = FallbackLocationGenerator()
    assert gen.generate(START, "Delhi", 4, "walking") == gen.generate(START, "Delhi", 4, "walking")


def test_blank_city_gets_a_generic_label():
    places = FallbackLocationGenerator().generate(START, "  ", 1, "walking")
    assert all(p.name.startswith("City ") for p in places)

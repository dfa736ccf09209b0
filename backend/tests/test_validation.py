from __future__ import annotations

import pytest

from modules.validation import filter_valid, validate_place, validate_plan_request
from schemas.itinerary import Coordinate, TransportMode

GOOD = {"id": "p1", "name": "Louvre", "latitude": 48.86, "longitude": 2.33,
        "rating": 4.7, "review_count": 10}


def test_valid_place():
    assert validate_place(GOOD)


@pytest.mark.parametrize(
    "override, fragment",
    [
        ({"id": ""}, "id"),
        ({"name": "  "}, "name"),
        ({"latitude": None}, "NULL"),
        ({"latitude": "north"}, "numeric"),
        ({"latitude": 95.0}, "latitude"),
        ({"longitude": -181.0}, "longitude"),
        ({"latitude": 0.0, "longitude": 0.0}, "missing"),
        ({"rating": 7}, "rating"),
        ({"review_count": -1}, "review_count"),
    ],
)
def test_invalid_place(override, fragment):
    result = validate_place(dict(GOOD, **override))
    assert not result.valid
    assert any(fragment in e for e in result.errors)


def test_filter_valid_keeps_only_good_records():
    bad = dict(GOOD, name="")
    assert filter_valid([GOOD, bad], validate_place, log=False) == [GOOD]


def test_plan_request_is_normalised():
    req = validate_plan_request((48.8566, 2.3522), "1.5", "Car/Taxi", [" Food ", ""], " Paris ")
    assert req.start == Coordinate(48.8566, 2.3522)
    assert req.duration_hours == 1.5
    assert req.transport_mode is TransportMode.driving
    assert req.preferences == ["food"]
    assert req.city == "Paris"


def test_plan_request_reports_every_problem_at_once():
    with pytest.raises(ValueError) as exc:
        validate_plan_request({"latitude": 0, "longitude": 200}, -1, "boat", [1])
    msg = str(exc.value)
    assert msg.startswith("ERROR_INVALID_INPUT:")
    for fragment in ("longitude", "duration_hours", "boat", "preferences"):
        assert fragment in msg


def test_duration_upper_bound_is_inclusive():
    assert validate_plan_request((0.1, 0.1), 24, "walking").duration_hours == 24

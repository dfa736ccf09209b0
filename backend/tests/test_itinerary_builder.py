from __future__ import annotations

import pytest

from modules.planning.itinerary_builder import ItineraryBuilder, target_stop_count
from modules.tool_usage.distance_tool import estimate_travel_minutes
from modules.tool_usage.travel_time_provider import TravelTimeProvider
from schemas.itinerary import Coordinate, Stop
from tests.fakes import FakeRouting, make_place

START = Coordinate(48.8566, 2.3522)


def _north(deg: float) -> Coordinate:
    return Coordinate(START.latitude + deg, START.longitude)


@pytest.mark.parametrize(
    "hours, count",
    [(0.5, 2), (1, 2), (1.01, 3), (3, 3), (4, 4), (5, 4), (5.5, 5), (24, 5)],
)
def test_target_stop_count(hours, count):
    assert target_stop_count(hours) == count


def test_validate_feasibility_rule(estimate_only):
    builder = ItineraryBuilder(estimate_only, max_workers=1)
    seq = [Stop.start(START), Stop(name="A", coordinate=_north(0.0045))]   # 7 min walk
    assert builder.validate(seq, "walking", 27).is_feasible
    check = builder.validate(seq, "walking", 26)
    assert not check.is_feasible
    assert check.total_travel_minutes == 7
    assert check.remaining_minutes == 19
    assert len(check.legs) == 1


def test_ample_budget_is_feasible_and_consistent(travel_times):
    candidates = [
        make_place(str(i), f"P{i}", lat=START.latitude + 0.002 * i) for i in range(1, 8)
    ]
    it = ItineraryBuilder(travel_times, max_workers=3).build(START, candidates, 3, "walking")

    assert it.is_feasible
    assert len(it.visit_stops) == target_stop_count(3)
    assert it.stops[0].is_start
    assert len(it.legs) == len(it.stops) - 1
    assert it.total_travel_minutes == sum(leg.travel_minutes for leg in it.legs)
    assert it.remaining_minutes == pytest.approx(180 - it.total_travel_minutes)
    assert all(s.time_to_spend_minutes >= 10 for s in it.stops)
    # nearest first
    assert [s.name for s in it.visit_stops] == ["P1", "P2", "P3"]


def test_candidates_are_tried_nearest_first(estimate_only):
    far = make_place("far", "Far", lat=START.latitude + 0.02)
    near = make_place("near", "Near", lat=START.latitude + 0.001)
    it = ItineraryBuilder(estimate_only).build(START, [far, near], 1, "walking")
    assert it.visit_stops[0].name == "Near"


def test_tight_budget_yields_infeasible_start_only(estimate_only):
    far = make_place("far", "Far", lat=START.latitude + 0.018)    # ~2 km, 25 min walk
    it = ItineraryBuilder(estimate_only).build(START, [far], 0.25, "walking")
    assert not it.is_feasible
    assert [s.name for s in it.stops] == ["Starting Point"]
    assert it.stops[0].time_to_spend_minutes == 15
    assert it.legs == []
    assert it.total_travel_minutes == 0


def test_budget_below_one_stop_skips_the_search(travel_times, routing):
    near = make_place("near", "Near", lat=START.latitude + 0.0005)
    it = ItineraryBuilder(travel_times).build(START, [near], 0.1, "walking")
    assert not it.is_feasible
    assert routing.calls == []


def test_first_failing_candidate_stops_the_search(estimate_only):
    a = make_place("a", "A", lat=START.latitude + 0.0045)     # 7 min from start
    b = make_place("b", "B", lat=START.latitude - 0.0135)     # 25 min from A
    c = make_place("c", "C", lat=START.latitude + 0.0144)     # 14 min from A
    # [S,A,B] needs 62 min, [S,A,C] would need 51; budget is 55
    it = ItineraryBuilder(estimate_only).build(START, [c, b, a], 55 / 60, "walking")
    assert [s.name for s in it.visit_stops] == ["A"]
    assert it.is_feasible


def test_no_candidates_is_infeasible(estimate_only):
    it = ItineraryBuilder(estimate_only).build(START, [], 2, "driving")
    assert not it.is_feasible
    assert len(it.stops) == 1
    assert it.total_budget_minutes == 120
    assert it.transport_mode.value == "driving"


def test_single_routing_failure_only_estimates_that_leg(cache):
    p1, p2, p3 = (
        make_place(str(i), f"P{i}", lat=START.latitude + 0.002 * i) for i in range(1, 4)
    )
    routing = FakeRouting(fail_for=(p2.coordinate,))
    it = ItineraryBuilder(TravelTimeProvider(routing, cache)).build(
        START, [p3, p2, p1], 3, "walking"
    )

    assert [s.name for s in it.visit_stops] == ["P1", "P2", "P3"]
    assert [leg.is_estimated for leg in it.legs] == [False, True, False]
    assert it.legs[1].travel_minutes == estimate_travel_minutes(p1.coordinate, p2.coordinate, "walking")
    assert it.total_travel_minutes == sum(leg.travel_minutes for leg in it.legs)
    assert it.is_feasible

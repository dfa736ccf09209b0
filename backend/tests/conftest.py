from __future__ import annotations

import pytest

from db.cache import InMemoryTTLCache
from modules.planning.adventure_planner import AdventurePlanner
from modules.planning.candidate_finder import CandidateLocationFinder
from modules.planning.itinerary_builder import ItineraryBuilder
from modules.observability.logger import StructuredLogger
from modules.tool_usage.place_search_provider import PlaceSearchProvider
from modules.tool_usage.travel_time_provider import TravelTimeProvider
from schemas.itinerary import Coordinate
from tests.fakes import FakeClock, FakePlaceSearch, FakeRouting

PARIS = Coordinate(48.8566, 2.3522)


@pytest.fixture
def start() -> Coordinate:
    return PARIS


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> InMemoryTTLCache:
    return InMemoryTTLCache(3600, clock=clock)


@pytest.fixture
def routing() -> FakeRouting:
    return FakeRouting()


@pytest.fixture
def travel_times(routing, cache) -> TravelTimeProvider:
    return TravelTimeProvider(routing, cache, native_modes={"walking", "driving"}, transit_factor=0.5)


@pytest.fixture
def estimate_only(cache) -> TravelTimeProvider:
    return TravelTimeProvider(None, cache)


@pytest.fixture
def make_planner(tmp_path):
    """Build an AdventurePlanner around a FakePlaceSearch and optional router."""

    def _make(search: FakePlaceSearch, routing=None, events_enabled: bool = False) -> AdventurePlanner:
        places = PlaceSearchProvider(search, InMemoryTTLCache(3600))
        tt = TravelTimeProvider(routing, InMemoryTTLCache(3600))
        return AdventurePlanner(
            finder=CandidateLocationFinder(places, max_workers=2),
            builder=ItineraryBuilder(tt, max_workers=2),
            events=StructuredLogger(logs_dir=tmp_path, enabled=events_enabled),
        )

    return _make

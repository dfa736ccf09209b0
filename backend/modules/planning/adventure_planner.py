"""
modules/planning/adventure_planner.py
---------------------------------------
Top-level planning pipeline: request → Itinerary.

  1. validate_plan_request()            — ERROR_INVALID_INPUT on bad input
  2. CandidateLocationFinder.find()     — real places (may be empty)
  3. FallbackLocationGenerator.generate — only when step 2 found nothing;
                                          itinerary.used_fallback_locations=True
  4. ItineraryBuilder.build()           — greedy sequence + legs + dwell times

An infeasible itinerary is returned, not raised; infeasibility_hint() turns
it into something a user can act on.

Wiring (build_default_planner):
  USE_STUB_PLACES=true   → StubPlaceSearch,   else GooglePlacesClient
  USE_STUB_ROUTING=true  → no routing client, every leg is estimated
                           else GoogleRoutesClient
  CACHE_BACKEND          → in-memory or Redis TTL caches (db.build_cache)
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Any, Iterable, Optional

import config
from db.cache import build_cache
from modules.observability.logger import StructuredLogger
from modules.planning.candidate_finder import CandidateLocationFinder
from modules.planning.fallback_locations import FallbackLocationGenerator
from modules.planning.itinerary_builder import ItineraryBuilder
from modules.tool_usage.attraction_tool import GooglePlacesClient, StubPlaceSearch
from modules.tool_usage.distance_tool import speed_kmh
from modules.tool_usage.place_search_provider import PlaceSearchProvider
from modules.tool_usage.routing_tool import GoogleRoutesClient
from modules.tool_usage.travel_time_provider import TravelTimeProvider
from modules.validation import validate_plan_request
from schemas.itinerary import Itinerary, TransportMode

logger = logging.getLogger(__name__)


class AdventurePlanner:
    def __init__(
        self,
        finder: CandidateLocationFinder,
        builder: ItineraryBuilder,
        fallback: Optional[FallbackLocationGenerator] = None,
        events: Optional[StructuredLogger] = None,
    ) -> None:
        self.finder = finder
        self.builder = builder
        self.fallback = fallback or FallbackLocationGenerator()
        self.events = events or StructuredLogger()

    def plan(
        self,
        start: Any,
        city: str,
        duration_hours: Any,
        transport_mode: Any,
        preferences: Optional[Iterable[str]] = None,
    ) -> Itinerary:
        """Raises ValueError(ERROR_INVALID_INPUT) on bad input; never on infeasibility."""
        req = validate_plan_request(start, duration_hours, transport_mode, preferences, city)
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        try:
            self.events.log(request_id, "plan_start", {
                "city": req.city,
                "start": req.start.to_dict(),
                "duration_hours": req.duration_hours,
                "transport_mode": req.transport_mode.value,
                "preferences": req.preferences,
            })

            candidates = self.finder.find(
                req.start, req.city, req.duration_hours, req.transport_mode, req.preferences
            )
            self.events.log(request_id, "candidates_found", {"count": len(candidates)})

            used_fallback = False
            if not candidates:
                candidates = self.fallback.generate(
                    req.start, req.city, req.duration_hours, req.transport_mode
                )
                used_fallback = True
                logger.warning(
                    "No real places near %s (%s); using %d synthetic stops",
                    req.start, req.city or "?", len(candidates),
                )
                self.events.log(request_id, "fallback_locations_used", {"count": len(candidates)})

            itinerary = self.builder.build(
                req.start, candidates, req.duration_hours, req.transport_mode, city=req.city
            )
            itinerary.used_fallback_locations = used_fallback

            self.events.log(request_id, "plan_complete", {
                "is_feasible": itinerary.is_feasible,
                "stops": len(itinerary.visit_stops),
                "total_travel_minutes": itinerary.total_travel_minutes,
                "remaining_minutes": itinerary.remaining_minutes,
                "used_fallback_locations": used_fallback,
            })
            return itinerary
        finally:
            self.events.close(request_id)


def infeasibility_hint(itinerary: Itinerary) -> Optional[str]:
    """Actionable suggestion for an infeasible itinerary; None when feasible."""
    if itinerary.is_feasible:
        return None
    hours = itinerary.total_budget_minutes / 60.0
    mode = itinerary.transport_mode
    suggestions = [f"allow more than {hours:g} h"]
    faster = [m.value for m in TransportMode if speed_kmh(m) > speed_kmh(mode)]
    if faster:
        suggestions.append(f"switch to {' or '.join(faster)}")
    return f"No stop fits within {hours:g} h by {mode.value}; {' or '.join(suggestions)}."


# ─────────────────────────────────────────────────────────────────────────────
# Default wiring
# ─────────────────────────────────────────────────────────────────────────────

def build_default_planner() -> AdventurePlanner:
    """Assemble a planner from config.py; one set of caches per planner."""
    routing = None if config.USE_STUB_ROUTING else GoogleRoutesClient()
    search = StubPlaceSearch() if config.USE_STUB_PLACES else GooglePlacesClient()

    travel_times = TravelTimeProvider(routing, build_cache(config.TRAVEL_TIME_CACHE_TTL))
    places = PlaceSearchProvider(search, build_cache(config.PLACE_SEARCH_CACHE_TTL))

    logger.info(
        "Planner wired: places=%s routing=%s cache=%s",
        type(search).__name__,
        type(routing).__name__ if routing else "estimate-only",
        config.CACHE_BACKEND,
    )
    return AdventurePlanner(
        finder=CandidateLocationFinder(places),
        builder=ItineraryBuilder(travel_times),
    )


_planner: AdventurePlanner | None = None
_planner_lock = threading.Lock()


def get_planner() -> AdventurePlanner:
    """Process-wide planner, created on first use."""
    global _planner
    with _planner_lock:
        if _planner is None:
            _planner = build_default_planner()
    return _planner


def plan_itinerary(
    start: Any,
    city: str,
    duration_hours: Any,
    transport_mode: Any,
    preferences: Optional[Iterable[str]] = None,
) -> Itinerary:
    return get_planner().plan(start, city, duration_hours, transport_mode, preferences)

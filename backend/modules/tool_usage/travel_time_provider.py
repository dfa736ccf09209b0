"""
modules/tool_usage/travel_time_provider.py
--------------------------------------------
Travel time between two coordinates for a transport mode, always answered.

Resolution order for get_travel_time():
  1. Cache hit (key: origin, destination rounded to 5 dp, mode) → return it.
  2. Routing capability:
       native mode      → routed duration, is_estimated=False
       non-native mode  → walking route × TRANSIT_SPEEDUP_FACTOR, is_estimated=True
  3. Any routing failure, or no routing configured
       → distance_tool.estimate_travel_minutes(), is_estimated=True

Whatever step 2 or 3 produced is written back to the cache, so repeated
lookups inside one TTL never reach the routing capability twice.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Protocol

import config
from db.cache import TTLCache
from db.redis_client import travel_time_key
from modules.tool_usage.distance_tool import distance_meters, estimate_travel_minutes
from schemas.itinerary import Coordinate, Leg, Stop, TransportMode
from schemas.provider_results import RoutingResult, TravelTimeResult

logger = logging.getLogger(__name__)


class RoutingCapability(Protocol):
    def travel_time(
        self, origin: Coordinate, destination: Coordinate, mode: TransportMode
    ) -> RoutingResult: ...


def _seconds_to_minutes(seconds: float) -> int:
    return int(math.ceil(seconds / 60.0))


class TravelTimeProvider:
    """Cached, failure-tolerant travel time lookups."""

    def __init__(
        self,
        routing: Optional[RoutingCapability],
        cache: TTLCache,
        native_modes: Optional[Iterable[str]] = None,
        transit_factor: Optional[float] = None,
    ) -> None:
        self.routing = routing
        self.cache = cache
        self.native_modes = frozenset(
            native_modes if native_modes is not None else config.ROUTING_NATIVE_MODES
        )
        self.transit_factor = (
            transit_factor if transit_factor is not None else config.TRANSIT_SPEEDUP_FACTOR
        )

    def get_travel_time(
        self,
        origin: Coordinate,
        destination: Coordinate,
        mode: TransportMode | str,
    ) -> TravelTimeResult:
        mode = TransportMode.parse(mode)
        key = travel_time_key(origin, destination, mode.value)

        cached = self.cache.get(key)
        if cached is not None:
            return TravelTimeResult.from_dict(cached)

        result = self._lookup(origin, destination, mode)
        self.cache.set(key, result.to_dict())
        return result

    def build_leg(self, origin: Stop, destination: Stop, mode: TransportMode | str) -> Leg:
        tt = self.get_travel_time(origin.coordinate, destination.coordinate, mode)
        return Leg(
            origin_name=origin.name,
            dest_name=destination.name,
            travel_minutes=tt.travel_minutes,
            distance_meters=tt.distance_meters,
            is_estimated=tt.is_estimated,
            steps=[dict(s) for s in tt.steps],
        )

    # ── internals ────────────────────────────────────────────────────────────

    def _lookup(
        self, origin: Coordinate, destination: Coordinate, mode: TransportMode
    ) -> TravelTimeResult:
        if self.routing is None:
            return self._estimate(origin, destination, mode)
        try:
            if mode.value in self.native_modes:
                route = self.routing.travel_time(origin, destination, mode)
                return TravelTimeResult(
                    distance_meters=route.distance_meters,
                    travel_minutes=_seconds_to_minutes(route.duration_seconds),
                    steps=[dict(s) for s in route.steps],
                    is_estimated=False,
                )
            # derived from the walking route
            route = self.routing.travel_time(origin, destination, TransportMode.walking)
            walk_minutes = _seconds_to_minutes(route.duration_seconds)
            return TravelTimeResult(
                distance_meters=route.distance_meters,
                travel_minutes=int(math.ceil(walk_minutes * self.transit_factor)),
                steps=[dict(s) for s in route.steps],
                is_estimated=True,
            )
        except Exception as exc:
            # Contract: never raise to the planner; degrade to the geometric estimate.
            logger.warning(
                "Routing failed %s -> %s (%s), using estimate: %s",
                origin, destination, mode.value, exc,
            )
            return self._estimate(origin, destination, mode)

    @staticmethod
    def _estimate(
        origin: Coordinate, destination: Coordinate, mode: TransportMode
    ) -> TravelTimeResult:
        return TravelTimeResult(
            distance_meters=distance_meters(origin, destination),
            travel_minutes=estimate_travel_minutes(origin, destination, mode),
            steps=[],
            is_estimated=True,
        )

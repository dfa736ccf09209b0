"""
modules/planning/itinerary_builder.py
---------------------------------------
Greedy nearest-first itinerary construction under a time budget.

Algorithm (all times in minutes):
  1. target = target_stop_count(duration_hours)      (start excluded)
  2. candidates sorted by haversine distance from start (stable)
  3. for each candidate, while fewer than target accepted:
         append → validate(sequence)
         feasible   → keep, continue
         infeasible → pop it and STOP (later, farther candidates are not tried)
  4. validate(final sequence) → legs → TimeAllocator

Feasibility:
    remaining = budget − Σ leg.travel_minutes
    feasible  ⇔ remaining ≥ len(sequence) × MIN_MINUTES_PER_STOP

An itinerary with zero accepted stops is reported as infeasible even though
the lone start point trivially fits the budget.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

import config
from modules.planning.time_allocator import TimeAllocator
from modules.tool_usage.distance_tool import distance_meters
from modules.tool_usage.travel_time_provider import TravelTimeProvider
from schemas.itinerary import Coordinate, Itinerary, Leg, Place, Stop, TransportMode

logger = logging.getLogger(__name__)


def target_stop_count(duration_hours: float) -> int:
    """Number of stops to aim for, start point excluded."""
    if duration_hours <= 1:
        return 2
    if duration_hours <= 3:
        return 3
    if duration_hours <= 5:
        return 4
    return 5


@dataclass
class ValidationResult:
    legs: list[Leg] = field(default_factory=list)
    total_travel_minutes: int = 0
    remaining_minutes: float = 0.0
    is_feasible: bool = False


class ItineraryBuilder:
    def __init__(
        self,
        travel_times: TravelTimeProvider,
        allocator: Optional[TimeAllocator] = None,
        max_workers: Optional[int] = None,
        min_minutes_per_stop: Optional[int] = None,
    ) -> None:
        self.travel_times = travel_times
        self.allocator = allocator or TimeAllocator()
        self.max_workers = max(1, max_workers or config.PLANNER_MAX_WORKERS)
        self.min_minutes = (
            config.MIN_MINUTES_PER_STOP if min_minutes_per_stop is None else min_minutes_per_stop
        )

    # ── validation ───────────────────────────────────────────────────────────

    def validate(
        self,
        sequence: list[Stop],
        mode: TransportMode | str,
        budget_minutes: float,
    ) -> ValidationResult:
        mode = TransportMode.parse(mode)
        pairs = list(zip(sequence, sequence[1:]))

        def leg_for(pair: tuple[Stop, Stop]) -> Leg:
            return self.travel_times.build_leg(pair[0], pair[1], mode)

        if self.max_workers > 1 and len(pairs) > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pairs))) as pool:
                legs = list(pool.map(leg_for, pairs))
        else:
            legs = [leg_for(p) for p in pairs]

        total = sum(leg.travel_minutes for leg in legs)
        remaining = budget_minutes - total
        return ValidationResult(
            legs=legs,
            total_travel_minutes=total,
            remaining_minutes=remaining,
            is_feasible=remaining >= len(sequence) * self.min_minutes,
        )

    # ── construction ─────────────────────────────────────────────────────────

    def build(
        self,
        start: Coordinate,
        candidates: list[Place],
        duration_hours: float,
        transport_mode: TransportMode | str,
        city: str = "",
    ) -> Itinerary:
        mode = TransportMode.parse(transport_mode)
        budget = duration_hours * 60.0
        target = target_stop_count(duration_hours)

        sequence: list[Stop] = [Stop.start(start)]
        ordered = sorted(candidates, key=lambda p: distance_meters(start, p.coordinate))
        accepted = 0

        if budget < self.min_minutes:
            logger.info("Budget %.0f min is below one stop's minimum; skipping search", budget)
            ordered = []

        for place in ordered:
            if accepted >= target:
                break
            sequence.append(Stop.from_place(place))
            check = self.validate(sequence, mode, budget)
            if not check.is_feasible:
                logger.debug(
                    "Stopping at %r: remaining %.0f min < %d needed",
                    place.name, check.remaining_minutes, len(sequence) * self.min_minutes,
                )
                sequence.pop()
                break
            accepted += 1

        final = self.validate(sequence, mode, budget)
        stops = self.allocator.allocate(sequence, final.legs, budget)
        itinerary = Itinerary(
            stops=stops,
            legs=final.legs,
            total_travel_minutes=final.total_travel_minutes,
            remaining_minutes=final.remaining_minutes,
            is_feasible=final.is_feasible and accepted > 0,
            transport_mode=mode,
            total_budget_minutes=budget,
            city=city,
        )
        logger.info(
            "Built itinerary: %d/%d stops, travel %d min, remaining %.0f min, feasible=%s",
            accepted, target, itinerary.total_travel_minutes,
            itinerary.remaining_minutes, itinerary.is_feasible,
        )
        return itinerary

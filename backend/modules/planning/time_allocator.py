"""
modules/planning/time_allocator.py
------------------------------------
Splits the non-travel part of the budget into dwell time per stop.

    remaining = budget − Σ leg.travel_minutes
    n         = number of stops (start included)

    remaining < n × MIN_MINUTES_PER_STOP
        → every stop gets MIN_MINUTES_PER_STOP
    otherwise
        weights: start 0.5, last 1.0, everything in between 1.2
        minutes_i = round_half_up(MIN + w_i × (remaining − n × MIN) / Σw)

Rounding is per stop, so Σ dwell may differ from `remaining` by a minute or
two; totals are reported from the legs, never from the rounded dwell times.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional

import config
from schemas.itinerary import Leg, Stop

_WEIGHT_START:    float = 0.5
_WEIGHT_LAST:     float = 1.0
_WEIGHT_INTERIOR: float = 1.2


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _weight(index: int, count: int) -> float:
    if index == 0:
        return _WEIGHT_START
    if index == count - 1:
        return _WEIGHT_LAST
    return _WEIGHT_INTERIOR


def allocate(
    stops: list[Stop],
    legs: list[Leg],
    total_budget_minutes: float,
    min_minutes: Optional[int] = None,
) -> list[Stop]:
    """
    Return copies of *stops* with time_to_spend / travel_time_to_next filled in.

    With only the start point left (an infeasible plan) the whole budget is
    allocated to it, e.g. 0.25 h gives "Starting Point" 15 min.
    """
    min_minutes = config.MIN_MINUTES_PER_STOP if min_minutes is None else min_minutes
    n = len(stops)
    if n == 0:
        return []

    remaining = total_budget_minutes - sum(leg.travel_minutes for leg in legs)

    if remaining < n * min_minutes:
        dwell = [min_minutes] * n
    else:
        weights = [_weight(i, n) for i in range(n)]
        per_weight = (remaining - n * min_minutes) / sum(weights)
        dwell = [_round_half_up(min_minutes + w * per_weight) for w in weights]

    allocated: list[Stop] = []
    for i, stop in enumerate(stops):
        travel_next = legs[i].travel_minutes if i < len(legs) and i < n - 1 else 0
        allocated.append(
            replace(stop, time_to_spend_minutes=dwell[i], travel_time_to_next_minutes=travel_next)
        )
    return allocated


class TimeAllocator:
    """Thin wrapper so the builder can take an allocator by injection."""

    def __init__(self, min_minutes: Optional[int] = None) -> None:
        self.min_minutes = config.MIN_MINUTES_PER_STOP if min_minutes is None else min_minutes

    def allocate(self, stops: list[Stop], legs: list[Leg], total_budget_minutes: float) -> list[Stop]:
        return allocate(stops, legs, total_budget_minutes, self.min_minutes)

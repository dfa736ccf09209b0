"""
schemas/provider_results.py
---------------------------
Explicit result types for the two external capabilities, plus the errors
raised at that boundary.

  RoutingResult       — one origin→destination route from the routing capability
  PlaceSearchResult   — places returned by one search call
  TravelTimeResult    — what TravelTimeProvider hands to the planner
                        (routed or estimated; always present)

Provider payloads are parsed into these types at the boundary; a payload that
is missing a required field raises MalformedPayloadError instead of flowing
on as a partial object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from schemas.itinerary import Place


class ProviderError(RuntimeError):
    """Network / HTTP / quota / no-route failure from an external capability."""


class MalformedPayloadError(ValueError):
    """Provider answered, but the payload is missing required fields."""


@dataclass(frozen=True)
class RoutingResult:
    distance_meters: float
    duration_seconds: float
    steps: tuple[dict[str, Any], ...] = ()

    def __post_init__(self) -> None:
        if self.distance_meters < 0 or self.duration_seconds < 0:
            raise MalformedPayloadError(
                f"RoutingResult must be non-negative "
                f"(distance={self.distance_meters}, duration={self.duration_seconds})"
            )


@dataclass(frozen=True)
class PlaceSearchResult:
    places: tuple[Place, ...] = ()
    # number of raw provider entries dropped at the boundary
    rejected: int = 0


@dataclass
class TravelTimeResult:
    distance_meters: float
    travel_minutes: int
    steps: list[dict[str, Any]] = field(default_factory=list)
    is_estimated: bool = False

    def to_dict(self) -> dict:
        return {
            "distance_meters": self.distance_meters,
            "travel_minutes": self.travel_minutes,
            "steps": [dict(s) for s in self.steps],
            "is_estimated": self.is_estimated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TravelTimeResult":
        return cls(
            distance_meters=float(data["distance_meters"]),
            travel_minutes=int(data["travel_minutes"]),
            steps=[dict(s) for s in data.get("steps", [])],
            is_estimated=bool(data.get("is_estimated", False)),
        )

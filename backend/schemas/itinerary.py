"""
schemas/itinerary.py
--------------------
Dataclass definitions for the planning data model.

  Coordinate — validated lat/lng pair (degrees)
  Place      — immutable point of interest returned by the search capability
  Leg        — travel segment between two consecutive stops
  Stop       — a Place (or the start point) plus allocated dwell/travel minutes
  Itinerary  — ordered stops + legs + feasibility verdict

Everything is created fresh per planning request; nothing here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class TransportMode(str, Enum):
    walking = "walking"
    transit = "transit"
    driving = "driving"

    @classmethod
    def parse(cls, value: "str | TransportMode") -> "TransportMode":
        """
        Accept enum members, canonical names, and the legacy wire spellings
        ("public transit", "car/taxi").  Raises ValueError on anything else.
        """
        if isinstance(value, TransportMode):
            return value
        key = str(value).strip().lower()
        key = _MODE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"ERROR_INVALID_INPUT: unsupported transport mode {value!r}; "
                f"expected one of {[m.value for m in cls]}"
            ) from None


_MODE_ALIASES: dict[str, str] = {
    "public transit": "transit",
    "public_transit": "transit",
    "car/taxi":       "driving",
    "car":            "driving",
    "taxi":           "driving",
    "drive":          "driving",
    "walk":           "walking",
}


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.latitude <= 90.0):
            raise ValueError(f"latitude={self.latitude} is outside valid range [-90, 90]")
        if not (-180.0 <= self.longitude <= 180.0):
            raise ValueError(f"longitude={self.longitude} is outside valid range [-180, 180]")

    def rounded(self, places: int) -> tuple[float, float]:
        return round(self.latitude, places), round(self.longitude, places)

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: dict) -> "Coordinate":
        return cls(float(data["latitude"]), float(data["longitude"]))


@dataclass(frozen=True)
class Place:
    """
    Single point of interest.

    Identity is `id` (provider-assigned).  `rating` is on the 0–5 scale and
    None when the provider has no rating; `review_count` likewise.
    """
    id: str
    name: str
    coordinate: Coordinate
    rating: Optional[float] = None
    review_count: Optional[int] = None
    categories: frozenset[str] = frozenset()
    address: str = ""
    description: str = ""
    is_synthetic: bool = False

    def dedup_key(self) -> tuple[str, float, float]:
        """Fallback identity for providers that reuse or omit ids."""
        lat, lng = self.coordinate.rounded(4)
        return self.name.strip().lower(), lat, lng

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "coordinate": self.coordinate.to_dict(),
            "rating": self.rating,
            "review_count": self.review_count,
            "categories": sorted(self.categories),
            "address": self.address,
            "description": self.description,
            "is_synthetic": self.is_synthetic,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Place":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            coordinate=Coordinate.from_dict(data["coordinate"]),
            rating=data.get("rating"),
            review_count=data.get("review_count"),
            categories=frozenset(data.get("categories", ())),
            address=data.get("address", ""),
            description=data.get("description", ""),
            is_synthetic=bool(data.get("is_synthetic", False)),
        )


@dataclass
class Leg:
    origin_name: str
    dest_name: str
    travel_minutes: int
    distance_meters: float
    is_estimated: bool = False
    steps: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "origin_name": self.origin_name,
            "dest_name": self.dest_name,
            "travel_minutes": self.travel_minutes,
            "distance_meters": round(self.distance_meters, 1),
            "is_estimated": self.is_estimated,
            "steps": list(self.steps),
        }


@dataclass
class Stop:
    """
    One entry of the itinerary.  The first stop is the start location and has
    no `place`.  The two minute fields are written by TimeAllocator only.
    """
    name: str
    coordinate: Coordinate
    place: Optional[Place] = None
    time_to_spend_minutes: int = 0
    travel_time_to_next_minutes: int = 0

    @classmethod
    def start(cls, coordinate: Coordinate, name: str = "Starting Point") -> "Stop":
        return cls(name=name, coordinate=coordinate)

    @classmethod
    def from_place(cls, place: Place) -> "Stop":
        return cls(name=place.name, coordinate=place.coordinate, place=place)

    @property
    def is_start(self) -> bool:
        return self.place is None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "location": self.coordinate.to_dict(),
            "place": self.place.to_dict() if self.place else None,
            "time_to_spend_minutes": self.time_to_spend_minutes,
            "travel_time_to_next_minutes": self.travel_time_to_next_minutes,
        }


@dataclass
class Itinerary:
    """
    Top-level output of the planning engine.

    `is_feasible=False` is a valid business outcome (budget too small), not an
    error; the caller decides how to surface it.
    """
    stops: list[Stop] = field(default_factory=list)
    legs: list[Leg] = field(default_factory=list)
    total_travel_minutes: int = 0
    remaining_minutes: float = 0.0
    is_feasible: bool = False
    transport_mode: TransportMode = TransportMode.walking
    total_budget_minutes: float = 0.0
    used_fallback_locations: bool = False
    city: str = ""

    @property
    def visit_stops(self) -> list[Stop]:
        """Stops excluding the start location."""
        return [s for s in self.stops if not s.is_start]

    def to_dict(self) -> dict:
        return {
            "city": self.city,
            "transport_mode": self.transport_mode.value,
            "total_budget_minutes": self.total_budget_minutes,
            "total_travel_minutes": self.total_travel_minutes,
            "remaining_minutes": self.remaining_minutes,
            "is_feasible": self.is_feasible,
            "used_fallback_locations": self.used_fallback_locations,
            "stops": [s.to_dict() for s in self.stops],
            "legs": [leg.to_dict() for leg in self.legs],
        }

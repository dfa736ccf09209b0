"""
modules/planning/candidate_finder.py
--------------------------------------
Two-tier candidate search around the start location.

  1. Radius   = duration_hours × MODE_PROFILES[mode]["search_m_per_hour"],
                clamped to [SEARCH_RADIUS_MIN_M, SEARCH_RADIUS_MAX_M].
  2. Primary  = PRIMARY_CATEGORIES + preference categories;
                keep rating ≥ 4.0 or review_count > 50.
  3. Secondary (only if primary yielded < 5);
                keep rating ≥ 3.5 or review_count > 20; stop at 10.
  4. Generic  (category=None) search if both tiers came back empty.
  5. Dedup → sort by rating desc (absent = 0, stable) → first MAX_CANDIDATES.

Category searches inside a tier run on a bounded thread pool, one batch of
PLANNER_MAX_WORKERS at a time.  Results are merged in category order, so the
output does not depend on which request finished first.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional

import config
from modules.tool_usage.place_search_provider import PlaceSearchProvider
from schemas.itinerary import Coordinate, Place, TransportMode

logger = logging.getLogger(__name__)

# ── Category tiers ────────────────────────────────────────────────────────────
PRIMARY_CATEGORIES: tuple[str, ...] = (
    "tourist_attraction",
    "museum",
    "art_gallery",
    "park",
    "historical_landmark",
)

SECONDARY_CATEGORIES: tuple[str, ...] = (
    "restaurant",
    "cafe",
    "shopping_mall",
    "library",
    "church",
    "mosque",
    "hindu_temple",
    "zoo",
    "amusement_park",
)

PREFERENCE_CATEGORIES: dict[str, tuple[str, ...]] = {
    "food":          ("restaurant", "cafe"),
    "culture":       ("art_gallery", "museum"),
    "nature":        ("park", "botanical_garden"),
    "shopping":      ("shopping_mall", "department_store"),
    "history":       ("historical_landmark", "museum"),
    "entertainment": ("amusement_park", "zoo"),
}

# ── Tier thresholds ───────────────────────────────────────────────────────────
_PRIMARY_MIN_RATING:    float = 4.0
_PRIMARY_MIN_REVIEWS:   int   = 50     # strictly greater than
_SECONDARY_MIN_RATING:  float = 3.5
_SECONDARY_MIN_REVIEWS: int   = 20     # strictly greater than
_SECONDARY_TRIGGER:     int   = 5      # run secondary tier below this many
_SECONDARY_STOP:        int   = 10     # stop secondary tier at this many


def search_radius_m(duration_hours: float, mode: TransportMode | str) -> float:
    mode = TransportMode.parse(mode)
    per_hour = config.MODE_PROFILES[mode.value]["search_m_per_hour"]
    radius = duration_hours * per_hour
    return max(config.SEARCH_RADIUS_MIN_M, min(radius, config.SEARCH_RADIUS_MAX_M))


def primary_categories(preferences: Optional[Iterable[str]] = None) -> list[str]:
    """PRIMARY_CATEGORIES followed by preference-implied ones, first occurrence wins."""
    ordered = list(PRIMARY_CATEGORIES)
    for pref in preferences or ():
        extra = PREFERENCE_CATEGORIES.get(pref.strip().lower())
        if extra is None:
            logger.debug("Ignoring unknown preference %r", pref)
            continue
        ordered.extend(extra)
    return list(dict.fromkeys(ordered))


def _passes(place: Place, min_rating: float, min_reviews: int) -> bool:
    return (
        (place.rating is not None and place.rating >= min_rating)
        or (place.review_count is not None and place.review_count > min_reviews)
    )


def _rating_key(place: Place) -> float:
    return place.rating if place.rating is not None else 0.0


class _Accumulator:
    """Order-preserving dedup on id, then on (name, rounded coordinate)."""

    def __init__(self) -> None:
        self.places: list[Place] = []
        self._ids: set[str] = set()
        self._keys: set[tuple[str, float, float]] = set()

    def add(self, place: Place) -> bool:
        key = place.dedup_key()
        if place.id in self._ids or key in self._keys:
            return False
        self._ids.add(place.id)
        self._keys.add(key)
        self.places.append(place)
        return True

    def __len__(self) -> int:
        return len(self.places)


class CandidateLocationFinder:
    def __init__(
        self,
        places: PlaceSearchProvider,
        max_workers: Optional[int] = None,
        max_candidates: Optional[int] = None,
    ) -> None:
        self.places = places
        self.max_workers = max(1, max_workers or config.PLANNER_MAX_WORKERS)
        self.max_candidates = max_candidates or config.MAX_CANDIDATES

    def find(
        self,
        start: Coordinate,
        city: str,
        duration_hours: float,
        transport_mode: TransportMode | str,
        preferences: Optional[Iterable[str]] = None,
    ) -> list[Place]:
        """
        Return up to max_candidates distinct places, best-rated first.

        An empty list is a normal outcome (remote area, provider down); the
        planner then falls back to synthetic locations.
        """
        radius = search_radius_m(duration_hours, transport_mode)
        logger.info(
            "Finding candidates near %s (%s), radius %.0f m", start, city or "?", radius
        )

        acc = _Accumulator()
        self._run_tier(
            acc, start, radius, primary_categories(preferences),
            accept=lambda p: _passes(p, _PRIMARY_MIN_RATING, _PRIMARY_MIN_REVIEWS),
        )
        logger.debug("Primary tier: %d places", len(acc))

        if len(acc) < _SECONDARY_TRIGGER:
            self._run_tier(
                acc, start, radius, list(SECONDARY_CATEGORIES),
                accept=lambda p: _passes(p, _SECONDARY_MIN_RATING, _SECONDARY_MIN_REVIEWS),
                stop_at=_SECONDARY_STOP,
            )
            logger.debug("After secondary tier: %d places", len(acc))

        if not len(acc):
            for p in self.places.search(start, None, radius):
                acc.add(p)
            logger.debug("Generic search: %d places", len(acc))

        ranked = sorted(acc.places, key=_rating_key, reverse=True)
        candidates = ranked[: self.max_candidates]
        logger.info("Found %d candidate places", len(candidates))
        return candidates

    def _run_tier(
        self,
        acc: _Accumulator,
        center: Coordinate,
        radius: float,
        categories: list[str],
        accept: Callable[[Place], bool],
        stop_at: Optional[int] = None,
    ) -> None:
        def search(category: str) -> list[Place]:
            return self.places.search(center, category, radius)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            for i in range(0, len(categories), self.max_workers):
                batch = categories[i : i + self.max_workers]
                for results in pool.map(search, batch):
                    for place in results:
                        if accept(place):
                            acc.add(place)
                    if stop_at is not None and len(acc) >= stop_at:
                        return

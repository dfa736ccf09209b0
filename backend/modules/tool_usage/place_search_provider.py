"""
modules/tool_usage/place_search_provider.py
---------------------------------------------
Quality-filtered, cached place search.

search(center, category, radius_m):
  - cache hit → cached places
  - else delegate to the place-search capability, drop low-quality places,
    cache the survivors
  - capability failure → [] (logged, not cached)

Quality rules:
  * name contains a denylisted word (police, station, factory, ...) → drop
  * rating present and < MIN_QUALITY_RATING                         → drop
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from db.cache import TTLCache
from db.redis_client import place_search_key
from schemas.itinerary import Coordinate, Place
from schemas.provider_results import PlaceSearchResult

logger = logging.getLogger(__name__)

NAME_DENYLIST: tuple[str, ...] = (
    "police",
    "station",
    "factory",
    "industrial",
    "office",
    "warehouse",
    "hospital",
)
MIN_QUALITY_RATING = 3.5


class PlaceSearchCapability(Protocol):
    def query(
        self, center: Coordinate, category: Optional[str], radius_m: float
    ) -> PlaceSearchResult: ...


def is_quality_place(place: Place) -> bool:
    name = place.name.lower()
    if any(word in name for word in NAME_DENYLIST):
        return False
    if place.rating is not None and place.rating < MIN_QUALITY_RATING:
        return False
    return True


class PlaceSearchProvider:
    def __init__(self, search: PlaceSearchCapability, cache: TTLCache) -> None:
        self.capability = search
        self.cache = cache

    def search(
        self,
        center: Coordinate,
        category: Optional[str],
        radius_m: float,
    ) -> list[Place]:
        key = place_search_key(center, category, radius_m)
        cached = self.cache.get(key)
        if cached is not None:
            return [Place.from_dict(p) for p in cached]

        try:
            result = self.capability.query(center, category, radius_m)
        except Exception as exc:
            # one failing category must not abort the whole search
            logger.warning(
                "Place search failed (cat=%s, r=%.0f m): %s", category or "*", radius_m, exc
            )
            return []

        places = [p for p in result.places if is_quality_place(p)]
        dropped = len(result.places) - len(places)
        if dropped or result.rejected:
            logger.debug(
                "cat=%s: %d kept, %d below quality bar, %d malformed",
                category or "*", len(places), dropped, result.rejected,
            )
        self.cache.set(key, [p.to_dict() for p in places])
        return places

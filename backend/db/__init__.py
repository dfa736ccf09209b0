"""
db/
----
Cache layer for the planner.

Storage architecture:
  Redis (redis-py) — optional shared hot cache
    traveltime:{origin}:{destination}:{mode}   TTL = TRAVEL_TIME_CACHE_TTL
    places:{center}:{category}:{radius}        TTL = PLACE_SEARCH_CACHE_TTL

  In-process — default (CACHE_BACKEND=memory)

Nothing is persisted; itineraries are never stored.

Public exports (import from here for convenience):
    from db import build_cache, TTLCache, get_redis
"""

from db.cache import InMemoryTTLCache, RedisTTLCache, TTLCache, build_cache
from db.redis_client import get_redis

__all__ = ["InMemoryTTLCache", "RedisTTLCache", "TTLCache", "build_cache", "get_redis"]

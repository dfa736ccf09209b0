"""
db/redis_client.py
-------------------
redis-py client — singleton plus key helpers for the two cache schemas.

Key schemas:

  1. traveltime:{o_lat},{o_lng}:{d_lat},{d_lng}:{mode}
       Type : String (JSON TravelTimeResult)
       TTL  : TRAVEL_TIME_CACHE_TTL  (default 3,600 s)

  2. places:{lat},{lng}:{category|*}:{radius_m}
       Type : String (JSON list of Place dicts)
       TTL  : PLACE_SEARCH_CACHE_TTL (default 3,600 s)

Coordinates are rounded to 5 decimal places (~1 m) so that repeated requests
from the "same" spot share a key.

Environment variables (set in config.py):
    REDIS_HOST        default: localhost
    REDIS_PORT        default: 6379
    REDIS_DB          default: 0
    REDIS_PASSWORD    default: ""  (empty = no auth)
"""

from __future__ import annotations

from typing import Any, Optional

import redis

import config
from schemas.itinerary import Coordinate

KEY_PRECISION = 5

# Module-level singleton; initialised lazily on first call to get_redis()
_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Return the singleton Redis client, creating it on first call."""
    global _client
    if _client is None:
        kwargs: dict[str, Any] = {
            "host":             config.REDIS_HOST,
            "port":             config.REDIS_PORT,
            "db":               config.REDIS_DB,
            "decode_responses": True,   # return str, not bytes
        }
        if config.REDIS_PASSWORD:
            kwargs["password"] = config.REDIS_PASSWORD
        _client = redis.Redis(**kwargs)
    return _client


def _coord_part(c: Coordinate) -> str:
    lat, lng = c.rounded(KEY_PRECISION)
    return f"{lat:.{KEY_PRECISION}f},{lng:.{KEY_PRECISION}f}"


def travel_time_key(origin: Coordinate, destination: Coordinate, mode: str) -> str:
    return f"traveltime:{_coord_part(origin)}:{_coord_part(destination)}:{mode}"


def place_search_key(center: Coordinate, category: Optional[str], radius_m: float) -> str:
    return f"places:{_coord_part(center)}:{category or '*'}:{int(round(radius_m))}"

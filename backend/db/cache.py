"""
db/cache.py
-----------
TTL cache abstraction injected into TravelTimeProvider / PlaceSearchProvider.

Built once at process start (build_cache) and passed explicitly; providers
never reach for a module-level cache.  Entries are independent and cheap to
recompute, so a stale or evicted entry only costs a re-fetch.

Backends:
  InMemoryTTLCache — lock-guarded dict with monotonic expiry (default)
  RedisTTLCache    — SETEX + JSON on the shared redis-py client
"""

from __future__ import annotations

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import redis

import config
from db.redis_client import get_redis

logger = logging.getLogger(__name__)


class TTLCache(ABC):
    """Key → JSON-serialisable value with per-cache expiry."""

    def __init__(self, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0 (got {ttl_seconds})")
        self.ttl_seconds = ttl_seconds

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on miss / expiry."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* for ttl_seconds."""

    @abstractmethod
    def clear(self) -> None:
        ...


class InMemoryTTLCache(TTLCache):
    """Thread-safe process-local cache.  Expired entries are evicted on read."""

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 10_000,
    ) -> None:
        super().__init__(ttl_seconds)
        self._clock = clock
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._data: dict[str, tuple[float, Any]] = {}   # key -> (expires_at, value)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if len(self._data) >= self._max_entries and key not in self._data:
                self._evict_expired()
                if len(self._data) >= self._max_entries:
                    # oldest insertion goes first
                    self._data.pop(next(iter(self._data)))
            self._data[key] = (self._clock() + self.ttl_seconds, value)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def _evict_expired(self) -> None:
        now = self._clock()
        for k in [k for k, (exp, _) in self._data.items() if now >= exp]:
            del self._data[k]


class RedisTTLCache(TTLCache):
    """
    Redis-backed cache shared across worker processes.

    Redis being down is treated as a miss (get) or a no-op (set); the caller
    then simply recomputes.
    """

    def __init__(
        self,
        ttl_seconds: float,
        prefix: str = "",
        client: redis.Redis | None = None,
    ) -> None:
        super().__init__(ttl_seconds)
        self._prefix = prefix
        self._client = client

    @property
    def client(self) -> redis.Redis:
        return self._client if self._client is not None else get_redis()

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(self._prefix + key)
        except redis.RedisError as exc:
            logger.warning("Redis GET failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.warning("Unreadable cache entry %s, treating as miss: %s", key, exc)
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            self.client.setex(self._prefix + key, int(self.ttl_seconds), json.dumps(value))
        except redis.RedisError as exc:
            logger.warning("Redis SETEX failed for %s: %s", key, exc)

    def clear(self) -> None:
        try:
            keys = list(self.client.scan_iter(f"{self._prefix}*"))
            if keys:
                self.client.delete(*keys)
        except redis.RedisError as exc:
            logger.warning("Redis clear failed: %s", exc)


def build_cache(ttl_seconds: float, prefix: str = "") -> TTLCache:
    """Construct the configured backend (config.CACHE_BACKEND)."""
    backend = config.CACHE_BACKEND.strip().lower()
    if backend == "redis":
        return RedisTTLCache(ttl_seconds, prefix=prefix)
    if backend != "memory":
        raise ValueError(
            f"ERROR_INVALID_CONFIG: CACHE_BACKEND={config.CACHE_BACKEND!r}; "
            "expected 'memory' or 'redis'"
        )
    return InMemoryTTLCache(ttl_seconds)

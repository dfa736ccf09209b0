from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import redis

import config
from db.cache import InMemoryTTLCache, RedisTTLCache, build_cache
from tests.fakes import FakeClock


def test_memory_cache_roundtrip(cache):
    cache.set("k", {"a": 1})
    assert cache.get("k") == {"a": 1}
    assert cache.get("missing") is None


def test_memory_cache_expires(cache, clock):
    cache.set("k", 1)
    clock.advance(3599)
    assert cache.get("k") == 1
    clock.advance(1)
    assert cache.get("k") is None
    assert len(cache) == 0


def test_memory_cache_clear(cache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()
    assert len(cache) == 0


def test_memory_cache_evicts_oldest_when_full():
    c = InMemoryTTLCache(60, clock=FakeClock(), max_entries=2)
    c.set("a", 1)
    c.set("b", 2)
    c.set("c", 3)
    assert c.get("a") is None
    assert c.get("b") == 2
    assert c.get("c") == 3


def test_memory_cache_prefers_evicting_expired_entries():
    clock = FakeClock()
    c = InMemoryTTLCache(60, clock=clock, max_entries=2)
    c.set("old", 1)
    clock.advance(61)
    c.set("fresh", 2)
    c.set("new", 3)
    assert c.get("fresh") == 2
    assert c.get("new") == 3


def test_ttl_must_be_positive():
    with pytest.raises(ValueError):
        InMemoryTTLCache(0)


def test_redis_cache_uses_setex_and_json():
    client = MagicMock()
    c = RedisTTLCache(3600, prefix="t:", client=client)
    c.set("k", {"a": 1})
    client.setex.assert_called_once_with("t:k", 3600, json.dumps({"a": 1}))

    client.get.return_value = json.dumps({"a": 1})
    assert c.get("k") == {"a": 1}
    client.get.assert_called_with("t:k")


def test_redis_cache_treats_outage_as_miss():
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.setex.side_effect = redis.ConnectionError("down")
    c = RedisTTLCache(60, client=client)
    c.set("k", 1)            # no exception
    assert c.get("k") is None


def test_redis_cache_treats_corrupt_entry_as_miss():
    client = MagicMock()
    client.get.return_value = b"{not json"
    assert RedisTTLCache(60, client=client).get("k") is None


def test_build_cache_dispatch(monkeypatch):
    monkeypatch.setattr(config, "CACHE_BACKEND", "memory")
    assert isinstance(build_cache(60), InMemoryTTLCache)
    monkeypatch.setattr(config, "CACHE_BACKEND", "Redis")
    assert isinstance(build_cache(60), RedisTTLCache)
    monkeypatch.setattr(config, "CACHE_BACKEND", "memcached")
    with pytest.raises(ValueError, match="ERROR_INVALID_CONFIG"):
        build_cache(60)

from __future__ import annotations

from typing import Dict, Optional

import pytest

from contact_discovery.cache import MemoryResultCache, RedisResultCache, cache_key
from contact_discovery.models import (
    PHONE,
    ConsolidatedFieldRecord,
    DiscoveryResult,
    PersonDescriptor,
    ProviderStatus,
    RunMetadata,
)


def _result() -> DiscoveryResult:
    person = PersonDescriptor(first_name="Jane", last_name="Doe", company="TechCorp")
    return DiscoveryResult(
        person=person,
        cache_key=cache_key(person),
        phones=[ConsolidatedFieldRecord(channel=PHONE, value="0412 345 678", confidence=0.8, sources=["apollo"])],
        metadata=RunMetadata(timestamp="2026-01-01T00:00:00+00:00", sources={"apollo": ProviderStatus.ok()}),
    )


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FakeRedis:
    def __init__(self) -> None:
        self.values: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.closed = False

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.values[key] = value
        self.ttls[key] = ttl

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)

    async def info(self, section: str) -> Dict[str, object]:
        return {"section": section, "used_memory": 1024}

    async def aclose(self) -> None:
        self.closed = True


def test_cache_key_ignores_case_and_has_prefix() -> None:
    upper = PersonDescriptor(first_name="JANE", last_name="DOE", company="TECHCORP")
    lower = PersonDescriptor(first_name="jane", last_name="doe", company="techcorp", title="CFO")

    assert cache_key(upper) == cache_key(lower)
    assert cache_key(upper).startswith("contact:")
    assert len(cache_key(upper)) == len("contact:") + 32


@pytest.mark.asyncio
async def test_memory_cache_round_trips_a_fresh_copy() -> None:
    cache = MemoryResultCache()
    result = _result()

    await cache.set(result.cache_key, result)
    cached = await cache.get(result.cache_key)

    assert cached == result
    assert cached is not result
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_memory_cache_expires_entries() -> None:
    clock = FakeClock()
    cache = MemoryResultCache(clock=clock)
    result = _result()

    await cache.set("k", result, ttl=60)
    clock.now += 59
    assert await cache.get("k") is not None
    clock.now += 2
    assert await cache.get("k") is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_memory_cache_delete() -> None:
    cache = MemoryResultCache()
    await cache.set("k", _result())

    await cache.delete("k")
    await cache.delete("missing")

    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_redis_cache_uses_setex_with_ttl() -> None:
    client = FakeRedis()
    cache = RedisResultCache(client=client)
    result = _result()

    await cache.set("k", result, ttl=3600)

    assert client.ttls["k"] == 3600
    assert await cache.get("k") == result
    await cache.delete("k")
    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_cache_stats_and_close() -> None:
    memory = MemoryResultCache()
    await memory.set("k", _result())
    assert await memory.stats() == {"type": "memory", "size": 1}
    await memory.close()
    assert len(memory) == 0

    client = FakeRedis()
    redis_cache = RedisResultCache(client=client)
    assert await redis_cache.stats() == {"type": "redis", "info": {"section": "memory", "used_memory": 1024}}
    await redis_cache.close()
    await redis_cache.close()
    assert client.closed is True

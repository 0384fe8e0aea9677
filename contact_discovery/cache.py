"""Memoisation of discovery results keyed by normalised person identity."""
from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

from .models import DiscoveryResult, PersonDescriptor

LOGGER = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 24 * 60 * 60
KEY_PREFIX = "contact:"


def cache_key(person: PersonDescriptor) -> str:
    """Return a stable key derived from the lower-cased name and company."""

    normalised = "_".join(
        [
            person.first_name.lower(),
            person.last_name.lower(),
            (person.company or "").lower(),
        ]
    )
    return KEY_PREFIX + hashlib.md5(normalised.encode("utf-8")).hexdigest()


class ResultCache(Protocol):
    """Key-value store holding serialised :class:`DiscoveryResult` objects."""

    async def get(self, key: str) -> Optional[DiscoveryResult]:  # pragma: no cover - protocol
        ...

    async def set(self, key: str, result: DiscoveryResult, ttl: int = DEFAULT_TTL_SECONDS) -> None:  # pragma: no cover - protocol
        ...

    async def delete(self, key: str) -> None:  # pragma: no cover - protocol
        ...

    async def stats(self) -> Dict[str, object]:  # pragma: no cover - protocol
        ...

    async def close(self) -> None:  # pragma: no cover - protocol
        ...


def _dumps(result: DiscoveryResult) -> str:
    return json.dumps(result.to_dict(), sort_keys=True, ensure_ascii=False)


def _loads(payload: str) -> DiscoveryResult:
    return DiscoveryResult.from_dict(json.loads(payload))


class MemoryResultCache:
    """Process-local cache with per-entry expiry."""

    backend = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[float, str]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Optional[DiscoveryResult]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return _loads(payload)

    async def set(self, key: str, result: DiscoveryResult, ttl: int = DEFAULT_TTL_SECONDS) -> None:
        self._entries[key] = (self._clock() + ttl, _dumps(result))

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def stats(self) -> Dict[str, object]:
        return {"type": self.backend, "size": len(self._entries)}

    async def close(self) -> None:
        self._entries.clear()


class RedisResultCache:
    """Cache backed by Redis ``SETEX`` entries."""

    backend = "redis"

    def __init__(self, url: str = "redis://localhost:6379", *, client=None) -> None:
        self._url = url
        self._client = client

    async def _connect(self):
        if self._client is None:
            import redis.asyncio as redis

            self._client = redis.from_url(self._url, decode_responses=True)
        return self._client

    async def get(self, key: str) -> Optional[DiscoveryResult]:
        client = await self._connect()
        payload = await client.get(key)
        if not payload:
            return None
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        return _loads(payload)

    async def set(self, key: str, result: DiscoveryResult, ttl: int = DEFAULT_TTL_SECONDS) -> None:
        client = await self._connect()
        await client.setex(key, ttl, _dumps(result))

    async def delete(self, key: str) -> None:
        client = await self._connect()
        await client.delete(key)

    async def stats(self) -> Dict[str, object]:
        client = await self._connect()
        info = await client.info("memory")
        return {"type": self.backend, "info": info}

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = [
    "DEFAULT_TTL_SECONDS",
    "MemoryResultCache",
    "RedisResultCache",
    "ResultCache",
    "cache_key",
]

"""Utilities for applying delay and rate limiting to provider calls."""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class DelayPolicy:
    """Fixed pause applied after every provider call."""

    delay_seconds: float = 0.0


class RateLimiter:
    """Enforces a minimum interval between calls across coroutines."""

    def __init__(self, calls_per_minute: Optional[float]) -> None:
        self._interval = 60.0 / float(calls_per_minute) if calls_per_minute else 0.0
        self._lock = asyncio.Lock()
        self._next_available = 0.0

    @property
    def interval(self) -> float:
        return self._interval

    async def acquire(self) -> None:
        if self._interval <= 0:
            return
        async with self._lock:
            now = time.monotonic()
            if now < self._next_available:
                await asyncio.sleep(self._next_available - now)
                now = time.monotonic()
            self._next_available = now + self._interval


_WRAPPED_METHODS = frozenset(
    {"search", "enrich_person", "enrich_profile", "validate_email", "validate_phone"}
)


class RateLimitedProvider:
    """Wrapper that throttles calls to any provider coroutine method."""

    def __init__(
        self,
        provider: Any,
        *,
        display_name: Optional[str] = None,
        delay_policy: Optional[DelayPolicy] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self._provider = provider
        self._display_name = display_name
        self._delay_policy = delay_policy or DelayPolicy()
        self._rate_limiter = rate_limiter or RateLimiter(None)

    @property
    def name(self) -> str:
        if self._display_name:
            return self._display_name
        return getattr(self._provider, "name", self._provider.__class__.__name__)

    @property
    def wrapped(self) -> Any:
        return self._provider

    def __getattr__(self, item: str) -> Any:
        attribute = getattr(self._provider, item)
        if item not in _WRAPPED_METHODS:
            return attribute

        async def throttled(*args: Any, **kwargs: Any) -> Any:
            await self._rate_limiter.acquire()
            result = await attribute(*args, **kwargs)
            if self._delay_policy.delay_seconds > 0:
                await asyncio.sleep(self._delay_policy.delay_seconds)
            return result

        return throttled


__all__ = ["DelayPolicy", "RateLimitedProvider", "RateLimiter"]

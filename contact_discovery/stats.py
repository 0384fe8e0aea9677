"""Usage statistics: request counts, enrichment hit rates and per-provider call counts."""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from .models import DiscoveryResult
from .store import KeyValueStore

STATS_KEY = "stats"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _default_stats(now: datetime) -> Dict[str, Any]:
    return {
        "started_at": now.isoformat(),
        "total_requests": 0,
        "by_endpoint": {},
        "by_day": {},
        "enrichment": {"total": 0, "with_email": 0, "with_phone": 0, "with_profile": 0},
        "api_calls": {},
        "last_updated": now.isoformat(),
    }


def _percent(part: int, total: int) -> int:
    return round(part / total * 100) if total else 0


def format_uptime(seconds: float) -> str:
    minutes_total = int(seconds // 60)
    days, remainder = divmod(minutes_total, 24 * 60)
    hours, minutes = divmod(remainder, 60)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class UsageStats:
    """Counters persisted as one document in a :class:`KeyValueStore`.

    Provider call counts are held in memory and written together with the next
    request or enrichment record, so a discovery run costs one store write.
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock
        self._pending_calls: Dict[str, Dict[str, int]] = {}

    def _load(self) -> Dict[str, Any]:
        return self._store.get(STATS_KEY) or _default_stats(self._clock())

    def _save(self, stats: Dict[str, Any]) -> None:
        for provider, pending in self._pending_calls.items():
            counters = stats["api_calls"].setdefault(provider, {"calls": 0, "errors": 0})
            counters["calls"] += pending["calls"]
            counters["errors"] += pending["errors"]
        self._pending_calls.clear()
        stats["last_updated"] = self._clock().isoformat()
        self._store.set(STATS_KEY, stats)

    def track_request(self, endpoint: str) -> None:
        stats = self._load()
        stats["total_requests"] += 1
        stats["by_endpoint"][endpoint] = stats["by_endpoint"].get(endpoint, 0) + 1
        today = self._clock().date().isoformat()
        stats["by_day"][today] = stats["by_day"].get(today, 0) + 1
        self._save(stats)

    def track_enrichment(self, result: DiscoveryResult) -> None:
        stats = self._load()
        enrichment = stats["enrichment"]
        enrichment["total"] += 1
        if result.emails:
            enrichment["with_email"] += 1
        if result.phones:
            enrichment["with_phone"] += 1
        if result.profile_url:
            enrichment["with_profile"] += 1
        self._save(stats)

    def track_api_call(self, provider: str, success: bool = True) -> None:
        counters = self._pending_calls.setdefault(provider, {"calls": 0, "errors": 0})
        counters["calls"] += 1
        if not success:
            counters["errors"] += 1

    def flush(self) -> None:
        if self._pending_calls:
            self._save(self._load())

    def summary(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Return raw counters plus derived success rates and a 7-day request history."""

        self.flush()
        stats = self._load()
        now = self._clock()
        today = today or now.date()
        enrichment = stats["enrichment"]
        last_7_days = []
        for offset in range(6, -1, -1):
            key = (today - timedelta(days=offset)).isoformat()
            last_7_days.append({"date": key, "requests": stats["by_day"].get(key, 0)})
        top_endpoints = sorted(stats["by_endpoint"].items(), key=lambda item: item[1], reverse=True)[:10]
        started_at = datetime.fromisoformat(stats["started_at"])

        return {
            **stats,
            "derived": {
                "email_success_rate": _percent(enrichment["with_email"], enrichment["total"]),
                "phone_success_rate": _percent(enrichment["with_phone"], enrichment["total"]),
                "last_7_days": last_7_days,
                "top_endpoints": [{"endpoint": name, "count": count} for name, count in top_endpoints],
                "uptime": format_uptime((now - started_at).total_seconds()),
            },
        }

    def reset(self) -> Dict[str, Any]:
        self._pending_calls.clear()
        stats = _default_stats(self._clock())
        self._save(stats)
        return stats


__all__ = ["UsageStats", "format_uptime"]

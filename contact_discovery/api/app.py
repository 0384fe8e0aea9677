"""FastAPI application exposing discovery, bulk upload, watchlist and stats endpoints."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ..errors import InvalidQueryError
from ..ingestion import check_compliance, parse_contacts_csv, results_to_csv
from ..ingestion.loaders import MissingColumnsError
from ..orchestrator import DiscoveryOrchestrator
from ..stats import UsageStats
from ..store import InMemoryStore
from ..watchlist import DuplicateContactError, EntryNotFoundError, Watchlist, check_watchlist

LOGGER = logging.getLogger(__name__)

MAX_BATCH_SIZE = 50
MAX_BULK_ROWS = 100

QueryPayload = Union[str, Dict[str, Any]]


class DiscoverRequest(BaseModel):
    query: QueryPayload
    skip_cache: bool = False


class BatchRequest(BaseModel):
    contacts: List[QueryPayload] = Field(default_factory=list)
    skip_cache: bool = False
    concurrency: Optional[int] = Field(default=None, ge=1, le=10)


class CsvRequest(BaseModel):
    csv: str


class WatchRequest(BaseModel):
    first_name: str
    last_name: str
    company: Optional[str] = None
    title: Optional[str] = None
    profile_url: Optional[str] = None
    email: Optional[str] = None


def create_app(
    orchestrator: DiscoveryOrchestrator,
    *,
    watchlist: Optional[Watchlist] = None,
    stats: Optional[UsageStats] = None,
    watch_lookup: Any = None,
) -> FastAPI:
    """Build the HTTP front end around an already configured orchestrator.

    ``watch_lookup`` is the people-enrichment provider polled by the watchlist
    check; it defaults to the orchestrator's first people provider.
    """

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        LOGGER.info("Shutting down contact discovery API")
        await orchestrator.close()

    app = FastAPI(title="Contact Discovery", lifespan=lifespan)
    if watchlist is None:
        watchlist = Watchlist(InMemoryStore())
    if stats is None:
        stats = UsageStats(InMemoryStore())

    @app.middleware("http")
    async def track_requests(request: Request, call_next):
        if request.url.path.startswith("/api/"):
            stats.track_request(request.url.path)
        return await call_next(request)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "providers": orchestrator.provider_names}

    @app.post("/api/discover")
    async def discover(payload: DiscoverRequest) -> Dict[str, Any]:
        try:
            result = await orchestrator.discover(payload.query, skip_cache=payload.skip_cache)
        except InvalidQueryError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return result.to_dict()

    @app.post("/api/discover/batch")
    async def discover_batch(payload: BatchRequest) -> Dict[str, Any]:
        if not payload.contacts:
            raise HTTPException(status_code=400, detail="No contacts supplied")
        if len(payload.contacts) > MAX_BATCH_SIZE:
            raise HTTPException(status_code=400, detail=f"Max {MAX_BATCH_SIZE} contacts per batch")
        batch = await orchestrator.discover_batch(
            payload.contacts, concurrency=payload.concurrency, skip_cache=payload.skip_cache
        )
        return batch.to_dict()

    @app.get("/api/cache/stats")
    async def cache_stats() -> Dict[str, Any]:
        if orchestrator.cache is None:
            return {"type": "none"}
        try:
            return await orchestrator.cache.stats()
        except Exception as exc:
            LOGGER.warning("Cache stats unavailable: %s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.delete("/api/cache/{key}")
    async def invalidate_cache(key: str) -> Dict[str, Any]:
        await orchestrator.invalidate(key)
        return {"deleted": key}

    def _parse_bulk(csv_text: str):
        try:
            contacts = parse_contacts_csv(csv_text)
        except MissingColumnsError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if len(contacts) > MAX_BULK_ROWS:
            raise HTTPException(status_code=400, detail=f"Max {MAX_BULK_ROWS} contacts")
        return check_compliance(contacts)

    @app.post("/api/bulk/validate")
    async def bulk_validate(payload: CsvRequest) -> Dict[str, Any]:
        return _parse_bulk(payload.csv).to_dict()

    @app.post("/api/bulk/export")
    async def bulk_export(payload: CsvRequest) -> Response:
        report = _parse_bulk(payload.csv)
        batch = await orchestrator.discover_batch([contact.to_query() for contact in report.valid_contacts])
        LOGGER.info("Bulk export: %d enriched, %d failed", batch.successful, batch.failed)
        return Response(
            content=results_to_csv(batch.results),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="enriched.csv"'},
        )

    @app.get("/api/watchlist")
    async def list_watchlist() -> Dict[str, Any]:
        entries = watchlist.entries()
        return {
            "contacts": [entry.to_dict() for entry in entries],
            "total": len(entries),
            "last_checked": watchlist.last_checked,
        }

    @app.post("/api/watchlist", status_code=201)
    async def add_to_watchlist(payload: WatchRequest) -> Dict[str, Any]:
        try:
            entry = watchlist.add(
                payload.first_name,
                payload.last_name,
                company=payload.company,
                title=payload.title,
                profile_url=payload.profile_url,
                email=payload.email,
            )
        except DuplicateContactError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return {"contact": entry.to_dict(), "total": len(watchlist)}

    @app.delete("/api/watchlist/{entry_id}")
    async def remove_from_watchlist(entry_id: str) -> Dict[str, Any]:
        try:
            removed = watchlist.remove(entry_id)
        except EntryNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Contact not found") from exc
        return {"removed": removed.to_dict(), "remaining": len(watchlist)}

    @app.post("/api/watchlist/check")
    async def run_watchlist_check() -> Dict[str, Any]:
        lookup = watch_lookup
        if lookup is None and orchestrator.people_providers:
            lookup = orchestrator.people_providers[0]
        if lookup is None:
            raise HTTPException(status_code=503, detail="No people-enrichment provider configured")
        report = await check_watchlist(watchlist, lookup)
        return report.to_dict()

    @app.get("/api/stats")
    async def usage_stats() -> Dict[str, Any]:
        return stats.summary()

    return app


__all__ = ["MAX_BATCH_SIZE", "MAX_BULK_ROWS", "create_app"]

"""Discovery orchestrator that coordinates search, enrichment and validation providers."""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..cache import ResultCache, cache_key
from ..config import DiscoveryConfig
from ..errors import InvalidQueryError, ProviderError
from ..domains import company_domain_queries, pick_company_domain
from ..geo import apply_geo_plausibility, region_country_code
from ..merge import consolidate_fields
from ..models import (
    EMAIL,
    PHONE,
    BatchResult,
    CandidateProfileHit,
    ConsolidatedFieldRecord,
    ContactFieldRecord,
    DiscoveryResult,
    EnrichmentResponse,
    PersonDescriptor,
    ProviderStatus,
    RunMetadata,
    ScoredProfileHit,
    ValidationOutcome,
    ValidationSummary,
)
from ..names import NameMatcher
from ..parsing import QueryLike, parse_query
from ..providers.base import (
    EmailValidator,
    PeopleEnrichmentProvider,
    PhoneValidator,
    ProfileEnrichmentProvider,
    ProfileSearchProvider,
)
from ..ranking import ProfileCandidateRanker, build_profile_queries
from ..validation import validate_email_field, validate_phone_field

LOGGER = logging.getLogger(__name__)

VALIDATION_BONUS = 0.1


class DiscoveryState(str, Enum):
    PARSED = "parsed"
    CACHE_CHECKED = "cache_checked"
    PROFILE_RESOLVED = "profile_resolved"
    FIELDS_QUERIED = "fields_queried"
    CONSOLIDATED = "consolidated"
    VALIDATED = "validated"
    CACHED = "cached"
    DONE = "done"


def provider_name(provider: Any) -> str:
    return getattr(provider, "name", None) or provider.__class__.__name__


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _describe_input(item: Any) -> Any:
    if isinstance(item, PersonDescriptor):
        return item.to_dict()
    if isinstance(item, Mapping):
        return dict(item)
    return str(item)


class DiscoveryOrchestrator:
    """Resolves one person into ranked, validated contact fields.

    Parameters
    ----------
    profile_search:
        Web search provider used to locate the person's professional profile.
    people_providers:
        Providers queried with the person descriptor, in priority order.
    profile_providers:
        Providers queried once a profile URL is known.
    email_validator / phone_validator:
        Optional external verifiers for the top-ranked email and phone.
    cache:
        Result cache; ``None`` disables memoisation.
    stats:
        Optional :class:`~contact_discovery.stats.UsageStats` receiving one
        record per provider call and per completed discovery.
    """

    def __init__(
        self,
        *,
        profile_search: Optional[ProfileSearchProvider] = None,
        people_providers: Sequence[PeopleEnrichmentProvider] = (),
        profile_providers: Sequence[ProfileEnrichmentProvider] = (),
        email_validator: Optional[EmailValidator] = None,
        phone_validator: Optional[PhoneValidator] = None,
        cache: Optional[ResultCache] = None,
        config: Optional[DiscoveryConfig] = None,
        ranker: Optional[ProfileCandidateRanker] = None,
        matcher: Optional[NameMatcher] = None,
        stats: Any = None,
    ) -> None:
        self._profile_search = profile_search
        self._people_providers = list(people_providers)
        self._profile_providers = list(profile_providers)
        self._email_validator = email_validator
        self._phone_validator = phone_validator
        self._cache = cache
        self._config = config or DiscoveryConfig()
        self._ranker = ranker or ProfileCandidateRanker()
        self._matcher = matcher or NameMatcher()
        self._stats = stats

    @property
    def config(self) -> DiscoveryConfig:
        return self._config

    @property
    def cache(self) -> Optional[ResultCache]:
        return self._cache

    @property
    def people_providers(self) -> List[PeopleEnrichmentProvider]:
        return list(self._people_providers)

    @property
    def provider_names(self) -> Dict[str, List[str]]:
        return {
            "profile_search": [provider_name(self._profile_search)] if self._profile_search else [],
            "people_enrichment": [provider_name(p) for p in self._people_providers],
            "profile_enrichment": [provider_name(p) for p in self._profile_providers],
            "email_validator": [provider_name(self._email_validator)] if self._email_validator else [],
            "phone_validator": [provider_name(self._phone_validator)] if self._phone_validator else [],
        }

    # ------------------------------------------------------------------
    # Single lookup

    async def discover(self, query: QueryLike, *, skip_cache: bool = False) -> DiscoveryResult:
        """Run the full pipeline for one query and return the consolidated result."""

        started = time.perf_counter()
        person = parse_query(query)
        if not person.last_name:
            raise InvalidQueryError(
                f"A family name is required to look up '{person.display_name()}'"
            )
        if not person.location:
            person = person.with_region(self._config.default_region)
        self._transition(person, DiscoveryState.PARSED)

        key = cache_key(person)
        if not skip_cache:
            cached = await self._cache_get(key)
            if cached is not None:
                LOGGER.info("Cache hit for %s (%s)", person.display_name(), key)
                cached.metadata.from_cache = True
                return cached
        self._transition(person, DiscoveryState.CACHE_CHECKED)

        sources: Dict[str, ProviderStatus] = {}
        if person.company and not person.domain and self._profile_search is not None:
            domain = await self._find_company_domain(person, sources)
            if domain:
                person = person.with_domain(domain)
                LOGGER.info("Resolved %s to domain %s", person.company, domain)

        hits, people_responses = await self._query_people(person, sources)

        profile_match: Optional[ScoredProfileHit] = None
        profile_url = person.profile_url
        if not profile_url:
            profile_match = self._ranker.best(hits, person)
            if profile_match is not None:
                profile_url = profile_match.url
            else:
                profile_url = next((r.profile_url for r in people_responses if r.profile_url), None)
        if profile_url:
            person = person.with_profile_url(profile_url)
            self._transition(person, DiscoveryState.PROFILE_RESOLVED)

        profile_responses: List[EnrichmentResponse] = []
        if profile_url and self._profile_providers:
            profile_responses = await self._query_profile(profile_url, sources)
        self._transition(person, DiscoveryState.FIELDS_QUERIED)

        responses = profile_responses + people_responses
        emails = consolidate_fields(self._pool(responses, EMAIL), EMAIL)
        phones = consolidate_fields(
            self._pool(responses, PHONE),
            PHONE,
            default_region=region_country_code(person.location),
        )
        phones = apply_geo_plausibility(phones, person.location)
        self._transition(person, DiscoveryState.CONSOLIDATED)

        validation = ValidationSummary(
            email=await self._validate_top(emails, person),
            phone=await self._validate_top(phones, person),
        )
        self._transition(person, DiscoveryState.VALIDATED)

        result = DiscoveryResult(
            person=person,
            cache_key=key,
            profile_url=profile_url,
            profile_match=profile_match,
            emails=emails,
            phones=phones,
            validation=validation,
            metadata=RunMetadata(timestamp=_utcnow(), sources=sources),
        )
        result.metadata.duration_ms = _elapsed_ms(started)
        await self._cache_set(key, result)
        self._transition(person, DiscoveryState.CACHED)

        if self._stats is not None:
            self._stats.track_enrichment(result)
        LOGGER.info(
            "Discovered %d email(s) and %d phone(s) for %s in %dms",
            len(emails),
            len(phones),
            person.display_name(),
            result.metadata.duration_ms,
        )
        self._transition(person, DiscoveryState.DONE)
        return result

    async def invalidate(self, key: str) -> None:
        if self._cache is not None:
            await self._cache.delete(key)

    async def close(self) -> None:
        """Release the cache connection; call once on the loop that used it."""

        if self._cache is not None:
            await self._cache.close()

    # ------------------------------------------------------------------
    # Batch lookup

    async def discover_batch(
        self,
        inputs: Iterable[QueryLike],
        *,
        concurrency: Optional[int] = None,
        delay: Optional[float] = None,
        skip_cache: bool = False,
    ) -> BatchResult:
        """Process ``inputs`` in windows of ``concurrency`` with a pause between windows.

        A failing item is recorded in ``errors`` and never aborts the batch.
        """

        items = list(inputs)
        window = max(1, concurrency or self._config.batch_concurrency)
        pause = self._config.batch_delay_seconds if delay is None else delay
        started = time.perf_counter()
        batch = BatchResult(total=len(items), started_at=_utcnow())

        for start in range(0, len(items), window):
            chunk = items[start:start + window]
            outcomes = await asyncio.gather(
                *(self.discover(item, skip_cache=skip_cache) for item in chunk),
                return_exceptions=True,
            )
            for item, outcome in zip(chunk, outcomes):
                batch.processed += 1
                if isinstance(outcome, Exception):
                    LOGGER.warning("Batch item %r failed: %s", item, outcome)
                    batch.failed += 1
                    batch.errors.append({"input": _describe_input(item), "error": str(outcome)})
                else:
                    batch.successful += 1
                    batch.results.append(outcome)
            if start + window < len(items) and pause > 0:
                await asyncio.sleep(pause)

        batch.finished_at = _utcnow()
        batch.duration_ms = _elapsed_ms(started)
        LOGGER.info(
            "Batch finished: %d/%d successful in %dms", batch.successful, batch.total, batch.duration_ms
        )
        return batch

    # ------------------------------------------------------------------
    # Provider fan-out

    async def _query_people(
        self, person: PersonDescriptor, sources: Dict[str, ProviderStatus]
    ) -> Tuple[List[CandidateProfileHit], List[EnrichmentResponse]]:
        calls: List[Awaitable[Any]] = [
            self._call_enrichment(provider, provider.enrich_person(person), sources)
            for provider in self._people_providers
        ]
        if person.profile_url or self._profile_search is None:
            if self._profile_search is not None:
                sources[provider_name(self._profile_search)] = ProviderStatus.skipped("Profile URL supplied")
            responses = await asyncio.gather(*calls)
            return [], [response for response in responses if response is not None]

        hits, *responses = await asyncio.gather(self._search_profiles(person, sources), *calls)
        return hits, [response for response in responses if response is not None]

    async def _query_profile(
        self, profile_url: str, sources: Dict[str, ProviderStatus]
    ) -> List[EnrichmentResponse]:
        responses = await asyncio.gather(
            *(
                self._call_enrichment(provider, provider.enrich_profile(profile_url), sources)
                for provider in self._profile_providers
            )
        )
        return [response for response in responses if response is not None]

    async def _search_profiles(
        self, person: PersonDescriptor, sources: Dict[str, ProviderStatus]
    ) -> List[CandidateProfileHit]:
        provider = self._profile_search
        name = provider_name(provider)
        region_hint = region_country_code(person.location)
        hits: List[CandidateProfileHit] = []
        answered = 0
        productive = 0
        last_error = ""

        for index, query in enumerate(build_profile_queries(person, self._matcher)):
            if productive >= self._config.max_search_queries:
                break
            if index and self._config.search_delay_seconds > 0:
                await asyncio.sleep(self._config.search_delay_seconds)
            try:
                found = await self._with_timeout(provider.search(query, region_hint))
            except Exception as exc:
                last_error = self._describe_failure(name, exc)
                self._track_call(name, False)
                continue
            self._track_call(name, True)
            answered += 1
            LOGGER.debug("Search %r returned %d hit(s)", query, len(found))
            if found:
                hits.extend(found)
                productive += 1

        if answered:
            sources[name] = ProviderStatus(status="ok", message=f"{len(hits)} hit(s)")
        else:
            sources[name] = ProviderStatus.error(last_error or "No search queries issued")
        return hits

    async def _find_company_domain(
        self, person: PersonDescriptor, sources: Dict[str, ProviderStatus]
    ) -> Optional[str]:
        provider = self._profile_search
        name = f"{provider_name(provider)}:domain"
        queries = company_domain_queries(person.company or "")[: self._config.max_domain_queries]
        if not queries:
            return None
        region_hint = region_country_code(person.location)
        urls: List[str] = []
        answered = 0
        last_error = ""

        for index, query in enumerate(queries):
            if index and self._config.search_delay_seconds > 0:
                await asyncio.sleep(self._config.search_delay_seconds)
            try:
                found = await self._with_timeout(provider.search(query, region_hint))
            except Exception as exc:
                last_error = self._describe_failure(name, exc)
                self._track_call(provider_name(provider), False)
                continue
            self._track_call(provider_name(provider), True)
            answered += 1
            urls.extend(hit.url for hit in found)

        if not answered:
            sources[name] = ProviderStatus.error(last_error or "No domain queries issued")
            return None
        domain = pick_company_domain(urls)
        sources[name] = ProviderStatus(status="ok", message=domain or "No company domain found")
        return domain

    async def _call_enrichment(
        self, provider: Any, call: Awaitable[EnrichmentResponse], sources: Dict[str, ProviderStatus]
    ) -> Optional[EnrichmentResponse]:
        name = provider_name(provider)
        try:
            response = await self._with_timeout(call)
        except Exception as exc:
            sources[name] = ProviderStatus.error(self._describe_failure(name, exc))
            self._track_call(name, False)
            return None
        response = response or EnrichmentResponse()
        # Attribute records to the configured provider name (wrappers may rename).
        for record in response.emails + response.phones:
            record.source = name
        sources[name] = ProviderStatus.ok(response)
        self._track_call(name, True)
        return response

    async def _with_timeout(self, call: Awaitable[Any]) -> Any:
        return await asyncio.wait_for(call, timeout=self._config.provider_timeout_seconds)

    def _describe_failure(self, name: str, exc: Exception) -> str:
        if isinstance(exc, asyncio.TimeoutError):
            message = f"Timed out after {self._config.provider_timeout_seconds:g}s"
            LOGGER.warning("Provider %s: %s", name, message)
            return message
        if isinstance(exc, ProviderError):
            LOGGER.warning("Provider %s failed: %s", name, exc.message)
            return exc.message
        LOGGER.exception("Provider %s raised an unexpected error", name)
        return str(exc) or exc.__class__.__name__

    @staticmethod
    def _pool(responses: Iterable[EnrichmentResponse], channel: str) -> List[ContactFieldRecord]:
        pooled: List[ContactFieldRecord] = []
        for response in responses:
            pooled.extend(response.emails if channel == EMAIL else response.phones)
        return pooled

    # ------------------------------------------------------------------
    # Validation

    async def _validate_top(
        self, records: List[ConsolidatedFieldRecord], person: PersonDescriptor
    ) -> Optional[ValidationOutcome]:
        if not records:
            return None
        top = records[0]
        try:
            if top.channel == EMAIL:
                outcome = await self._with_timeout(validate_email_field(top.value, self._email_validator))
            else:
                outcome = await self._with_timeout(
                    validate_phone_field(top.value, person.location, self._phone_validator)
                )
        except asyncio.TimeoutError:
            LOGGER.warning("Validation of %s timed out", top.value)
            outcome = ValidationOutcome(value=top.value, valid=False, reason="timeout", skipped=True)

        if outcome.valid and not outcome.skipped:
            top.boost(VALIDATION_BONUS)
            top.verified = True
            top.validation_details = outcome.to_dict()
        return outcome

    # ------------------------------------------------------------------
    # Cache and bookkeeping

    async def _cache_get(self, key: str) -> Optional[DiscoveryResult]:
        if self._cache is None:
            return None
        try:
            return await self._cache.get(key)
        except Exception as exc:
            LOGGER.warning("Cache read failed for %s, treating as miss: %s", key, exc)
            return None

    async def _cache_set(self, key: str, result: DiscoveryResult) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.set(key, result, self._config.cache_ttl_seconds)
        except Exception as exc:
            LOGGER.warning("Cache write failed for %s: %s", key, exc)

    def _track_call(self, name: str, success: bool) -> None:
        if self._stats is not None:
            self._stats.track_api_call(name, success)

    @staticmethod
    def _transition(person: PersonDescriptor, state: DiscoveryState) -> None:
        LOGGER.debug("%s -> %s", person.display_name(), state.value)


__all__ = ["DiscoveryOrchestrator", "DiscoveryState", "VALIDATION_BONUS", "provider_name"]

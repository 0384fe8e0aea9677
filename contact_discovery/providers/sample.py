"""In-process providers that serve canned data, for offline runs and demos."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..models import (
    EMAIL,
    PHONE,
    CandidateProfileHit,
    ContactFieldRecord,
    EnrichmentResponse,
    PersonDescriptor,
)


class StaticSearchProvider:
    """Returns the same hits for every query."""

    name = "static-search"

    def __init__(self, hits: Optional[Sequence[Dict[str, Any]]] = None, name: Optional[str] = None) -> None:
        self.name = name or self.name
        self._hits = [CandidateProfileHit(**hit) for hit in hits or []]
        self.queries: List[str] = []

    async def search(self, query: str, region_hint: Optional[str] = None) -> List[CandidateProfileHit]:
        self.queries.append(query)
        return list(self._hits)


class StaticEnrichmentProvider:
    """Reports fixed emails/phones; serves both people and profile enrichment."""

    name = "static"

    def __init__(
        self,
        emails: Optional[Sequence[Any]] = None,
        phones: Optional[Sequence[Any]] = None,
        profile_url: Optional[str] = None,
        title: Optional[str] = None,
        company: Optional[str] = None,
        confidence: float = 0.8,
        name: Optional[str] = None,
    ) -> None:
        self.name = name or self.name
        self._emails = list(emails or [])
        self._phones = list(phones or [])
        self._profile_url = profile_url
        self._title = title
        self._company = company
        self._confidence = confidence
        self.calls = 0

    def _records(self, channel: str, entries: Sequence[Any]) -> List[ContactFieldRecord]:
        records: List[ContactFieldRecord] = []
        for entry in entries:
            if isinstance(entry, dict):
                records.append(
                    ContactFieldRecord(
                        channel=channel,
                        value=entry["value"],
                        source=self.name,
                        subtype=entry.get("subtype"),
                        confidence=entry.get("confidence", self._confidence),
                    )
                )
            else:
                records.append(
                    ContactFieldRecord(channel=channel, value=str(entry), source=self.name, confidence=self._confidence)
                )
        return records

    def _response(self) -> EnrichmentResponse:
        self.calls += 1
        return EnrichmentResponse(
            emails=self._records(EMAIL, self._emails),
            phones=self._records(PHONE, self._phones),
            profile_url=self._profile_url,
            title=self._title,
            company=self._company,
        )

    async def enrich_person(self, person: PersonDescriptor) -> EnrichmentResponse:
        return self._response()

    async def enrich_profile(self, profile_url: str) -> EnrichmentResponse:
        return self._response()


__all__ = ["StaticEnrichmentProvider", "StaticSearchProvider"]

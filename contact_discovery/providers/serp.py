"""Web search through SerpAPI's Google engine."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models import CandidateProfileHit
from .base import HttpProvider

_GOOGLE_DOMAINS = {"us": "google.com", "nz": "google.co.nz", "gb": "google.co.uk"}


class SerpApiSearchProvider(HttpProvider):
    """Runs Google searches and surfaces knowledge-graph profile links first."""

    name = "serpapi"
    BASE_URL = "https://serpapi.com"

    def __init__(self, api_key: Optional[str] = None, *, default_country: str = "au", **kwargs: Any) -> None:
        super().__init__(api_key, **kwargs)
        self.default_country = default_country

    async def search(self, query: str, region_hint: Optional[str] = None) -> List[CandidateProfileHit]:
        country = (region_hint or self.default_country).lower()
        if country == "uk":
            country = "gb"
        payload = await self._request(
            "GET",
            "/search.json",
            params={
                "api_key": self._require_api_key(),
                "engine": "google",
                "q": query,
                "num": 10,
                "gl": country,
                "hl": "en",
                "google_domain": _GOOGLE_DOMAINS.get(country, "google.com.au"),
            },
        )
        return parse_search_payload(payload)


def parse_search_payload(payload: Dict[str, Any]) -> List[CandidateProfileHit]:
    hits: List[CandidateProfileHit] = []

    profiles = (payload.get("knowledge_graph") or {}).get("profiles") or []
    for profile in profiles:
        link = profile.get("link") or ""
        if "linkedin.com" in link:
            hits.append(
                CandidateProfileHit(
                    url=link,
                    title=profile.get("name") or "LinkedIn Profile",
                    snippet="From Knowledge Graph",
                    from_knowledge_panel=True,
                    position=0,
                )
            )
            break

    for result in payload.get("organic_results") or []:
        link = result.get("link")
        if not link:
            continue
        hits.append(
            CandidateProfileHit(
                url=link,
                title=result.get("title") or "",
                snippet=result.get("snippet") or "",
                position=result.get("position"),
            )
        )
    return hits


__all__ = ["SerpApiSearchProvider", "parse_search_payload"]

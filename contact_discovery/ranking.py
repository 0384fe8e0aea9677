"""Scoring and selection of professional-profile search hits."""
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from .models import CandidateProfileHit, PersonDescriptor, ScoredProfileHit
from .names import NameMatcher

LOGGER = logging.getLogger(__name__)

PROFILE_URL_MARKER = "linkedin.com/in/"
PROFILE_SITE_FILTER = "site:linkedin.com/in/"

BASE_SCORE = 0.5
KNOWLEDGE_PANEL_BONUS = 0.35
FULL_NAME_IN_TITLE_BONUS = 0.2
FAMILY_NAME_IN_TITLE_BONUS = 0.1
NAME_IN_SLUG_BONUS = 0.15
COMPANY_BONUS = 0.2
PARTIAL_COMPANY_BONUS = 0.1
JOB_TITLE_BONUS = 0.1
TITLE_KEYWORD_BONUS = 0.05
LOCATION_TOKEN_BONUS = 0.03
POSITION_STEP = 0.02
KNOWLEDGE_PANEL_THRESHOLD = 0.8

TITLE_KEYWORDS = (
    "ceo",
    "cfo",
    "cto",
    "coo",
    "director",
    "manager",
    "founder",
    "partner",
    "principal",
    "vp",
    "president",
)


def profile_slug(url: str) -> str:
    """Return the lower-cased profile identifier following ``/in/`` in a URL."""

    lowered = (url or "").lower()
    if "/in/" not in lowered:
        return ""
    return lowered.split("/in/", 1)[1].split("/", 1)[0].split("?", 1)[0]


def normalise_profile_url(url: str) -> str:
    return url.split("?", 1)[0].rstrip("/").lower()


def score_profile_hit(hit: CandidateProfileHit, person: PersonDescriptor) -> ScoredProfileHit:
    """Apply the additive scoring rules to a single hit."""

    first = person.first_name.lower()
    last = person.last_name.lower()
    title = (hit.title or "").lower()
    snippet = (hit.snippet or "").lower()
    slug = profile_slug(hit.url)

    score = BASE_SCORE
    if hit.from_knowledge_panel:
        score += KNOWLEDGE_PANEL_BONUS

    full_name = f"{first} {last}"
    if full_name in title:
        score += FULL_NAME_IN_TITLE_BONUS
    elif last and last in title:
        score += FAMILY_NAME_IN_TITLE_BONUS

    dashed = f"{first}-{last}"
    joined = re.sub(r"\s+", "", f"{first}{last}")
    if slug and (dashed in slug or joined in slug.replace("-", "")):
        score += NAME_IN_SLUG_BONUS

    company = (person.company or "").lower().strip()
    if company:
        if company in title or company in snippet:
            score += COMPANY_BONUS
        else:
            words = [word for word in company.split() if len(word) > 2]
            if any(word in title or word in snippet for word in words):
                score += PARTIAL_COMPANY_BONUS

    job_title = (person.title or "").lower().strip()
    if job_title:
        if job_title in title or job_title in snippet:
            score += JOB_TITLE_BONUS
        for keyword in TITLE_KEYWORDS:
            if keyword in job_title and (keyword in title or keyword in snippet):
                score += TITLE_KEYWORD_BONUS

    location = (person.location or "").lower()
    if location:
        for token in re.split(r"[,\s]+", location):
            if len(token) > 2 and (token in snippet or token in title):
                score += LOCATION_TOKEN_BONUS

    if hit.position and 1 <= hit.position <= 3:
        score += (4 - hit.position) * POSITION_STEP

    name_in_slug = bool(slug) and ((bool(first) and first in slug) or (bool(last) and last in slug))
    return ScoredProfileHit(
        url=hit.url,
        title=hit.title,
        snippet=hit.snippet,
        confidence=min(score, 1.0),
        name_in_slug=name_in_slug,
        from_knowledge_panel=hit.from_knowledge_panel,
    )


class ProfileCandidateRanker:
    """Scores candidate profile hits and picks the most plausible one."""

    def rank(self, hits: Iterable[CandidateProfileHit], person: PersonDescriptor) -> List[ScoredProfileHit]:
        """Return every accepted hit, best first, one per distinct profile URL."""

        scored = [
            score_profile_hit(hit, person)
            for hit in hits
            if hit.url and PROFILE_URL_MARKER in hit.url.lower()
        ]

        accepted: List[ScoredProfileHit] = []
        for candidate in scored:
            if candidate.name_in_slug:
                accepted.append(candidate)
            elif candidate.from_knowledge_panel and candidate.confidence >= KNOWLEDGE_PANEL_THRESHOLD:
                accepted.append(candidate)
            else:
                LOGGER.debug("Rejected profile %s: name not in slug", candidate.url)

        seen = set()
        ranked: List[ScoredProfileHit] = []
        for candidate in sorted(accepted, key=lambda item: item.confidence, reverse=True):
            key = normalise_profile_url(candidate.url)
            if key in seen:
                continue
            seen.add(key)
            ranked.append(candidate)
        return ranked

    def best(self, hits: Iterable[CandidateProfileHit], person: PersonDescriptor) -> Optional[ScoredProfileHit]:
        ranked = self.rank(hits, person)
        return ranked[0] if ranked else None


def build_profile_queries(person: PersonDescriptor, matcher: Optional[NameMatcher] = None) -> List[str]:
    """Build profile search queries, most specific first."""

    matcher = matcher or NameMatcher()
    name = person.full_name
    queries: List[str] = []

    if person.company:
        queries.append(f'{PROFILE_SITE_FILTER} "{name}" "{person.company}"')
        queries.append(f'{PROFILE_SITE_FILTER} "{name}" {person.company}')
    if person.title and person.company:
        queries.append(f"{PROFILE_SITE_FILTER} {name} {person.title} {person.company}")
    if person.company:
        queries.append(f"{PROFILE_SITE_FILTER} {name} {person.company}")

        own = person.first_name.lower()
        variants = sorted(variant for variant in matcher.variants_of(person.first_name) if variant != own)
        for variant in variants[:2]:
            queries.append(f'{PROFILE_SITE_FILTER} "{variant} {person.last_name}" "{person.company}"')
    elif person.location:
        queries.append(f'{PROFILE_SITE_FILTER} "{name}" {person.location}')

    queries.append(f'{PROFILE_SITE_FILTER} "{name}"')
    return queries


__all__ = [
    "PROFILE_URL_MARKER",
    "ProfileCandidateRanker",
    "build_profile_queries",
    "normalise_profile_url",
    "profile_slug",
    "score_profile_hit",
]

from __future__ import annotations

import pytest

from contact_discovery.models import CandidateProfileHit, PersonDescriptor
from contact_discovery.ranking import (
    ProfileCandidateRanker,
    build_profile_queries,
    normalise_profile_url,
    profile_slug,
    score_profile_hit,
)


TOM = PersonDescriptor(
    first_name="Tom",
    last_name="Cowan",
    title="Partner",
    company="TDM Growth Partners",
    location="Sydney",
)


def test_profile_slug_and_normalisation() -> None:
    url = "https://au.LinkedIn.com/in/Tom-Cowan-123/?trk=public"

    assert profile_slug(url) == "tom-cowan-123"
    assert normalise_profile_url(url) == "https://au.linkedin.com/in/tom-cowan-123"
    assert profile_slug("https://example.com/about") == ""


def test_score_accumulates_additive_rules() -> None:
    person = PersonDescriptor(first_name="Jane", last_name="Doe", company="Acme Corp")
    hit = CandidateProfileHit(
        url="https://www.linkedin.com/in/jane-doe",
        title="Jane Doe - Engineer",
        snippet="Works at Acme",
        position=2,
    )

    scored = score_profile_hit(hit, person)

    # base + full name + slug + partial company + position 2
    assert scored.confidence == pytest.approx(0.5 + 0.2 + 0.15 + 0.1 + 0.04)
    assert scored.name_in_slug is True


def test_score_is_capped_at_one() -> None:
    hit = CandidateProfileHit(
        url="https://www.linkedin.com/in/tom-cowan-1a2b",
        title="Tom Cowan - Partner - TDM Growth Partners | LinkedIn",
        snippet="Sydney, New South Wales, Australia",
        from_knowledge_panel=True,
        position=1,
    )

    assert score_profile_hit(hit, TOM).confidence == 1.0


def test_ranker_picks_matching_profile_and_ignores_other_urls() -> None:
    hits = [
        CandidateProfileHit(url="https://tdmgrowth.com/team/tom-cowan", title="Tom Cowan | TDM", position=1),
        CandidateProfileHit(url="https://www.linkedin.com/in/jsmith", title="John Smith - Analyst", position=2),
        CandidateProfileHit(
            url="https://www.linkedin.com/in/tom-cowan-1a2b",
            title="Tom Cowan - Partner - TDM Growth Partners | LinkedIn",
            snippet="Sydney",
            position=3,
        ),
    ]

    best = ProfileCandidateRanker().best(hits, TOM)

    assert best is not None
    assert best.url == "https://www.linkedin.com/in/tom-cowan-1a2b"


def test_ranker_returns_none_without_name_in_slug() -> None:
    hits = [
        CandidateProfileHit(url="https://www.linkedin.com/in/jsmith", title="Tom Cowan - Partner", position=1),
        CandidateProfileHit(url="https://www.linkedin.com/in/abc123", title="TDM Growth Partners", position=2),
    ]

    assert ProfileCandidateRanker().best(hits, TOM) is None


def test_knowledge_panel_hit_accepted_without_name_in_slug() -> None:
    hits = [
        CandidateProfileHit(
            url="https://www.linkedin.com/in/abc123",
            title="Tom Cowan | LinkedIn",
            from_knowledge_panel=True,
            position=0,
        )
    ]

    best = ProfileCandidateRanker().best(hits, TOM)

    assert best is not None
    assert best.from_knowledge_panel is True
    assert best.confidence >= 0.8


def test_rank_dedupes_urls_and_keeps_search_order_on_ties() -> None:
    hits = [
        CandidateProfileHit(url="https://www.linkedin.com/in/tom-cowan-a", title="Tom Cowan"),
        CandidateProfileHit(url="https://www.linkedin.com/in/tom-cowan-b", title="Tom Cowan"),
        CandidateProfileHit(url="https://www.linkedin.com/in/tom-cowan-a/?trk=x", title="Tom Cowan"),
    ]

    ranked = ProfileCandidateRanker().rank(hits, TOM)

    assert [hit.url for hit in ranked] == [
        "https://www.linkedin.com/in/tom-cowan-a",
        "https://www.linkedin.com/in/tom-cowan-b",
    ]


def test_build_profile_queries_most_specific_first() -> None:
    person = PersonDescriptor(first_name="Tom", last_name="Cowan", title="Partner", company="TDM")

    queries = build_profile_queries(person)

    assert queries[0] == 'site:linkedin.com/in/ "Tom Cowan" "TDM"'
    assert 'site:linkedin.com/in/ Tom Cowan Partner TDM' in queries
    assert 'site:linkedin.com/in/ "thomas Cowan" "TDM"' in queries
    assert 'site:linkedin.com/in/ "tommy Cowan" "TDM"' in queries
    assert queries[-1] == 'site:linkedin.com/in/ "Tom Cowan"'


def test_build_profile_queries_uses_location_without_company() -> None:
    person = PersonDescriptor(first_name="Jane", last_name="Doe", location="Sydney")

    assert build_profile_queries(person) == [
        'site:linkedin.com/in/ "Jane Doe" Sydney',
        'site:linkedin.com/in/ "Jane Doe"',
    ]

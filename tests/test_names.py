from __future__ import annotations

import pytest

from contact_discovery.names import NICKNAMES, NameMatcher, levenshtein


def test_levenshtein_counts_single_edits() -> None:
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("same", "same") == 0


def test_variants_include_nicknames_and_canonical_forms() -> None:
    matcher = NameMatcher()

    assert {"bob", "robert", "bobby", "rob"} <= matcher.variants_of("Bob")
    assert {"robert", "bob"} <= matcher.variants_of("rob")
    assert matcher.variants_of("Zelda") == {"zelda"}


def test_variants_are_symmetric_across_the_table() -> None:
    matcher = NameMatcher()
    names = set(NICKNAMES)
    for nicks in NICKNAMES.values():
        names.update(nicks)

    for name in names:
        for variant in matcher.variants_of(name):
            assert name in matcher.variants_of(variant), (name, variant)


def test_similarity_tiers() -> None:
    matcher = NameMatcher()

    assert matcher.similarity("Robert", "robert") == 1.0
    assert matcher.similarity("Bob", "Robert") == 0.95
    assert matcher.similarity("Robert", "Bob") == 0.95
    assert matcher.similarity("Jon", "John") == pytest.approx(0.75)


def test_nickname_score_never_below_edit_distance_score() -> None:
    matcher = NameMatcher()
    for canonical, nicks in NICKNAMES.items():
        for nick in nicks:
            if nick == canonical:
                continue
            longest = max(len(nick), len(canonical))
            edit_score = 1 - levenshtein(nick, canonical) / longest
            assert matcher.similarity(canonical, nick) == 0.95
            assert 0.95 >= edit_score


def test_edit_tier_scales_by_longer_name() -> None:
    matcher = NameMatcher()

    assert matcher.similarity("Smith", "Smyth") == pytest.approx(0.8)
    assert matcher.similarity("Jonathon", "Jonathan") == pytest.approx(0.875)
    assert matcher.similarity("", "Ann") == 0.0

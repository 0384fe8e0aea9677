"""Name normalisation, nickname expansion, and fuzzy name similarity."""
from __future__ import annotations

from typing import Dict, List, Mapping, Set, Tuple

from rapidfuzz.distance import Levenshtein

NICKNAMES: Mapping[str, Tuple[str, ...]] = {
    "bob": ("robert", "bobby", "rob"),
    "robert": ("bob", "bobby", "rob"),
    "bill": ("william", "will", "billy"),
    "william": ("bill", "will", "billy"),
    "mike": ("michael", "mick", "mickey"),
    "michael": ("mike", "mick", "mickey"),
    "steve": ("steven", "stephen"),
    "steven": ("steve", "stephen"),
    "stephen": ("steve", "steven"),
    "jim": ("james", "jimmy"),
    "james": ("jim", "jimmy"),
    "dick": ("richard", "rick", "ricky"),
    "richard": ("dick", "rick", "ricky"),
    "dave": ("david", "davey"),
    "david": ("dave", "davey"),
    "tom": ("thomas", "tommy"),
    "thomas": ("tom", "tommy"),
    "joe": ("joseph", "joey"),
    "joseph": ("joe", "joey"),
    "dan": ("daniel", "danny"),
    "daniel": ("dan", "danny"),
    "tony": ("anthony", "anton"),
    "anthony": ("tony", "ant"),
    "chris": ("christopher", "christoph"),
    "christopher": ("chris", "christoph"),
    "matt": ("matthew", "matty"),
    "matthew": ("matt", "matty"),
    "nick": ("nicholas", "nicky"),
    "nicholas": ("nick", "nicky"),
    "alex": ("alexander", "alexandra", "alexis"),
    "alexander": ("alex", "xander"),
    "sam": ("samuel", "samantha"),
    "samuel": ("sam", "sammy"),
    "ed": ("edward", "eddie", "ted"),
    "edward": ("ed", "eddie", "ted"),
    "ben": ("benjamin", "benny"),
    "benjamin": ("ben", "benny"),
    "kate": ("katherine", "kathryn", "katie", "kathy"),
    "katherine": ("kate", "katie", "kathy"),
    "liz": ("elizabeth", "beth", "lizzy"),
    "elizabeth": ("liz", "beth", "lizzy"),
    "jen": ("jennifer", "jenny"),
    "jennifer": ("jen", "jenny"),
    "meg": ("margaret", "maggie", "peggy"),
    "margaret": ("meg", "maggie", "peggy"),
}

NICKNAME_MATCH_SCORE = 0.95


def normalise_name(name: str) -> str:
    """Lower-case a name and collapse internal whitespace."""

    return " ".join((name or "").lower().split())


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit insertion, deletion and substitution costs."""

    return Levenshtein.distance(a, b)


class NameMatcher:
    """Expands nickname equivalence classes and scores name similarity."""

    def __init__(self, nicknames: Mapping[str, Tuple[str, ...]] = NICKNAMES) -> None:
        self._nicknames: Dict[str, Tuple[str, ...]] = {
            key.lower(): tuple(value.lower() for value in values) for key, values in nicknames.items()
        }
        self._canonical_for: Dict[str, List[str]] = {}
        for canonical, nicks in self._nicknames.items():
            for nick in nicks:
                self._canonical_for.setdefault(nick, []).append(canonical)

    def variants_of(self, name: str) -> Set[str]:
        """Return the name plus every nickname-equivalent spelling."""

        lower = normalise_name(name)
        variants = {lower}
        variants.update(self._nicknames.get(lower, ()))
        for canonical in self._canonical_for.get(lower, []):
            variants.add(canonical)
            variants.update(self._nicknames[canonical])
        return variants

    def similarity(self, name_a: str, name_b: str) -> float:
        first = normalise_name(name_a)
        second = normalise_name(name_b)
        if first == second:
            return 1.0
        if second in self.variants_of(first):
            return NICKNAME_MATCH_SCORE
        return Levenshtein.normalized_similarity(first, second)


__all__ = ["NICKNAMES", "NameMatcher", "levenshtein", "normalise_name"]

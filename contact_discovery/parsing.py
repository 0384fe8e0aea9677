"""Parse free-text and structured discovery queries into person descriptors."""
from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Tuple, Union

from .models import PersonDescriptor

QueryLike = Union[str, Mapping[str, Any], PersonDescriptor]

_PROFILE_URL_PATTERN = re.compile(r"(https?://(?:www\.)?linkedin\.com/in/[^\s,]+)", re.IGNORECASE)
_AT_PATTERN = re.compile(r"\s+at\s+", re.IGNORECASE)
_TITLE_IN_PARENS = re.compile(r"(.+?)\s*\((.+?)\)")

_FIELD_SYNONYMS: Mapping[str, Tuple[str, ...]] = {
    "first_name": ("first_name", "firstname", "first", "given_name"),
    "last_name": ("last_name", "lastname", "last", "surname", "family_name"),
    "name": ("name", "full_name", "fullname"),
    "title": ("title", "job_title", "jobtitle", "position"),
    "company": ("company", "company_name", "organisation", "organization"),
    "domain": ("domain", "website", "company_domain"),
    "location": ("location", "region", "city"),
    "profile_url": ("profile_url", "linkedin", "linkedin_url", "linked_in", "linked_in_url"),
}


def split_name(text: str) -> Tuple[str, str]:
    """Split a name into the first token and everything after it."""

    tokens = (text or "").split()
    if not tokens:
        return "", ""
    return tokens[0], " ".join(tokens[1:])


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalise_key(key: str) -> str:
    snake = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", str(key))
    return snake.strip().lower().replace(" ", "_").replace("-", "_")


def parse_text(text: str) -> PersonDescriptor:
    """Parse a free-text query.

    Supported shapes are ``"Name, Title, Company, Location"``,
    ``"Name @ Company"`` / ``"Name (Title) at Company"`` and a bare name. A
    profile URL anywhere in the text is extracted before the other rules run.
    """

    remaining = (text or "").strip()
    profile_url: Optional[str] = None
    match = _PROFILE_URL_PATTERN.search(remaining)
    if match:
        profile_url = match.group(1)
        remaining = (remaining[: match.start()] + remaining[match.end():]).strip()

    first = last = ""
    title = company = location = None

    if "," in remaining:
        parts = [part.strip() for part in remaining.split(",")]
        first, last = split_name(parts[0])
        title = parts[1] if len(parts) > 1 and parts[1] else None
        company = parts[2] if len(parts) > 2 and parts[2] else None
        location = parts[3] if len(parts) > 3 and parts[3] else None
    elif "@" in remaining or _AT_PATTERN.search(remaining):
        if "@" in remaining:
            name_part, _, company_part = remaining.partition("@")
        else:
            name_part, company_part = _AT_PATTERN.split(remaining, maxsplit=1)
        name_part = name_part.strip()
        titled = _TITLE_IN_PARENS.match(name_part)
        if titled:
            first, last = split_name(titled.group(1))
            title = titled.group(2).strip()
        else:
            first, last = split_name(name_part)
        company = _clean(company_part)
    else:
        first, last = split_name(remaining)

    return PersonDescriptor(
        first_name=first,
        last_name=last,
        title=title,
        company=company,
        location=location,
        profile_url=profile_url,
    )


def parse_mapping(data: Mapping[str, Any]) -> PersonDescriptor:
    """Build a descriptor from a structured record, tolerating key variants."""

    normalised = {_normalise_key(key): value for key, value in data.items()}

    def pick(field_name: str) -> Optional[str]:
        for synonym in _FIELD_SYNONYMS[field_name]:
            value = _clean(normalised.get(synonym))
            if value:
                return value
        return None

    first = pick("first_name") or ""
    last = pick("last_name") or ""
    if not first and not last:
        first, last = split_name(pick("name") or "")

    return PersonDescriptor(
        first_name=first,
        last_name=last,
        title=pick("title"),
        company=pick("company"),
        domain=pick("domain"),
        location=pick("location"),
        profile_url=pick("profile_url"),
    )


def parse_query(query: QueryLike) -> PersonDescriptor:
    """Turn any supported query shape into a :class:`PersonDescriptor`."""

    if isinstance(query, PersonDescriptor):
        return query
    if isinstance(query, Mapping):
        return parse_mapping(query)
    return parse_text(str(query))


__all__ = ["QueryLike", "parse_mapping", "parse_query", "parse_text", "split_name"]

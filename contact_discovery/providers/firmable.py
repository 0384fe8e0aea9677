"""Firmable firmographic adapters (company lookup and profile-keyed person lookup)."""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List

from ..errors import ProviderError
from ..models import EMAIL, PHONE, ContactFieldRecord, EnrichmentResponse, PersonDescriptor
from .base import HttpProvider


def guess_company_domain(company: str) -> str:
    return re.sub(r"\s+", "", company.lower()) + ".com"


def email_matches_person(address: str, person: PersonDescriptor) -> bool:
    """Return True when a company mailbox plausibly belongs to ``person``."""

    lowered = address.lower()
    first = person.first_name.lower()
    last = person.last_name.lower()
    if not first or not last:
        return False
    candidates = (first, last, first[0] + last, f"{first}.{last}")
    return any(candidate in lowered for candidate in candidates)


def _values(entries: Iterable[Any]) -> List[str]:
    values: List[str] = []
    for entry in entries or []:
        value = entry.get("value") if isinstance(entry, dict) else entry
        if value:
            values.append(str(value))
    return values


class _FirmableBase(HttpProvider):
    BASE_URL = "https://api.firmable.com"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._require_api_key()}"}


class FirmableCompanyProvider(_FirmableBase):
    """Company-level lookup by website; keeps mailboxes that match the person."""

    name = "firmable"

    async def enrich_person(self, person: PersonDescriptor) -> EnrichmentResponse:
        if not person.domain and not person.company:
            return EnrichmentResponse()
        domain = person.domain or guess_company_domain(person.company or "")
        payload = await self._request("GET", "/company", params={"website": domain}, headers=self._headers())
        return parse_company_payload(payload, person, source=self.name)


class FirmableProfileProvider(_FirmableBase):
    """Person-level lookup that requires a profile URL."""

    name = "firmable-person"

    async def enrich_profile(self, profile_url: str) -> EnrichmentResponse:
        payload = await self._request("GET", "/people", params={"ln_url": profile_url}, headers=self._headers())
        if payload.get("error") or not payload.get("name"):
            raise ProviderError(self.name, str(payload.get("error") or "No person data returned"))
        return parse_person_payload(payload, source=self.name)


def parse_company_payload(
    payload: Dict[str, Any], person: PersonDescriptor, *, source: str = FirmableCompanyProvider.name
) -> EnrichmentResponse:
    response = EnrichmentResponse()
    if not payload.get("id"):
        return response
    for address in _values(payload.get("emails")):
        if email_matches_person(address, person):
            response.emails.append(
                ContactFieldRecord(channel=EMAIL, value=address, source=source, subtype="work", confidence=0.95)
            )
    for number in _values(payload.get("phones")):
        response.phones.append(
            ContactFieldRecord(channel=PHONE, value=number, source=source, subtype="company", confidence=0.8)
        )
    response.company = payload.get("name") or None
    return response


def parse_person_payload(payload: Dict[str, Any], *, source: str = FirmableProfileProvider.name) -> EnrichmentResponse:
    response = EnrichmentResponse()
    emails = payload.get("emails") or {}
    for address in _values(emails.get("work")):
        response.emails.append(
            ContactFieldRecord(channel=EMAIL, value=address, source=source, subtype="work", confidence=0.95)
        )
    for address in _values(emails.get("personal")):
        response.emails.append(
            ContactFieldRecord(channel=EMAIL, value=address, source=source, subtype="personal", confidence=0.7)
        )
    for number in _values(payload.get("phones")):
        is_au = number.startswith("+61") or number.startswith("04")
        response.phones.append(
            ContactFieldRecord(
                channel=PHONE,
                value=number,
                source=source,
                subtype="mobile-au" if is_au else "mobile",
                confidence=0.95 if is_au else 0.7,
            )
        )
    response.title = payload.get("headline") or payload.get("position") or None
    response.company = (payload.get("current_company") or {}).get("name") or None
    return response


__all__ = [
    "FirmableCompanyProvider",
    "FirmableProfileProvider",
    "email_matches_person",
    "parse_company_payload",
    "parse_person_payload",
]

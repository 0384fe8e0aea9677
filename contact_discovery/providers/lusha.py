"""Lusha person lookup adapter."""
from __future__ import annotations

from typing import Any, Dict

from ..models import EMAIL, PHONE, ContactFieldRecord, EnrichmentResponse, PersonDescriptor
from .base import HttpProvider


class LushaProvider(HttpProvider):
    name = "lusha"
    BASE_URL = "https://api.lusha.com"

    async def enrich_person(self, person: PersonDescriptor) -> EnrichmentResponse:
        params: Dict[str, Any] = {
            "firstName": person.first_name,
            "lastName": person.last_name,
            "refreshJobInfo": "true",
        }
        # Lusha matches better on a domain than on a free-text company name.
        if person.domain:
            params["companyDomain"] = person.domain
        elif person.company:
            params["companyName"] = person.company
        if person.profile_url:
            params["linkedinUrl"] = person.profile_url

        payload = await self._request(
            "GET",
            "/v2/person",
            params=params,
            headers={"api_key": self._require_api_key()},
        )
        return parse_person_payload(payload, source=self.name)


def parse_person_payload(payload: Dict[str, Any], *, source: str = LushaProvider.name) -> EnrichmentResponse:
    response = EnrichmentResponse()
    data = payload.get("data") or (payload.get("contact") or {}).get("data") or {}

    for entry in data.get("emailAddresses") or []:
        address = entry if isinstance(entry, str) else entry.get("email")
        if address:
            subtype = "work" if isinstance(entry, str) else entry.get("type") or "work"
            response.emails.append(
                ContactFieldRecord(channel=EMAIL, value=address, source=source, subtype=subtype, confidence=0.85)
            )
    for entry in data.get("phoneNumbers") or []:
        number = entry if isinstance(entry, str) else entry.get("number")
        if number:
            subtype = "mobile" if isinstance(entry, str) else entry.get("type") or "mobile"
            response.phones.append(
                ContactFieldRecord(channel=PHONE, value=number, source=source, subtype=subtype, confidence=0.8)
            )

    response.title = data.get("currentJobTitle") or None
    response.company = (data.get("company") or {}).get("name") or None
    return response


__all__ = ["LushaProvider", "parse_person_payload"]

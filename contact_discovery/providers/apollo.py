"""Apollo.io people-match adapter."""
from __future__ import annotations

import logging
from typing import Any, Dict

from ..models import EMAIL, PHONE, ContactFieldRecord, EnrichmentResponse, PersonDescriptor
from .base import HttpProvider

LOGGER = logging.getLogger(__name__)


class ApolloProvider(HttpProvider):
    """People-search enrichment backed by Apollo's ``people/match`` endpoint."""

    name = "apollo"
    BASE_URL = "https://api.apollo.io"

    async def enrich_person(self, person: PersonDescriptor) -> EnrichmentResponse:
        body: Dict[str, Any] = {
            "first_name": person.first_name,
            "last_name": person.last_name,
            "reveal_personal_emails": True,
            "reveal_phone_number": True,
        }
        if person.domain:
            body["domain"] = person.domain
        if person.company:
            body["organization_name"] = person.company
        if person.profile_url:
            body["linkedin_url"] = person.profile_url

        payload = await self._request(
            "POST",
            "/api/v1/people/match",
            json=body,
            headers={
                "x-api-key": self._require_api_key(),
                "Content-Type": "application/json",
                "Cache-Control": "no-cache",
            },
        )
        return parse_person_payload(payload, source=self.name)


def parse_person_payload(payload: Dict[str, Any], *, source: str = ApolloProvider.name) -> EnrichmentResponse:
    response = EnrichmentResponse()
    person = payload.get("person") or {}
    if not person:
        LOGGER.debug("Apollo returned no person match")
        return response

    if person.get("email"):
        response.emails.append(
            ContactFieldRecord(
                channel=EMAIL,
                value=person["email"],
                source=source,
                subtype="work",
                confidence=0.9,
                verified=person.get("email_status") == "verified" or None,
            )
        )
    for address in person.get("personal_emails") or []:
        response.emails.append(
            ContactFieldRecord(channel=EMAIL, value=address, source=source, subtype="personal", confidence=0.7)
        )
    for phone in person.get("phone_numbers") or []:
        number = phone.get("raw_number") or phone.get("sanitized_number")
        if number:
            response.phones.append(
                ContactFieldRecord(
                    channel=PHONE,
                    value=number,
                    source=source,
                    subtype=phone.get("type") or "mobile",
                    confidence=0.85,
                )
            )

    response.profile_url = person.get("linkedin_url") or None
    response.title = person.get("title") or None
    response.company = (person.get("organization") or {}).get("name") or None
    return response


__all__ = ["ApolloProvider", "parse_person_payload"]

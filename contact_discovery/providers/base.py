"""Provider interfaces and the shared HTTP plumbing used by vendor adapters."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

import httpx

from ..errors import ProviderError
from ..models import CandidateProfileHit, EnrichmentResponse, PersonDescriptor, ValidationOutcome

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0


class ProfileSearchProvider(Protocol):
    """Web search returning candidate professional-profile hits."""

    name: str

    async def search(self, query: str, region_hint: Optional[str] = None) -> List[CandidateProfileHit]:  # pragma: no cover - protocol
        ...


class PeopleEnrichmentProvider(Protocol):
    """People-search provider queried with a person descriptor."""

    name: str

    async def enrich_person(self, person: PersonDescriptor) -> EnrichmentResponse:  # pragma: no cover - protocol
        ...


class ProfileEnrichmentProvider(Protocol):
    """Provider keyed by an already-known profile URL."""

    name: str

    async def enrich_profile(self, profile_url: str) -> EnrichmentResponse:  # pragma: no cover - protocol
        ...


class EmailValidator(Protocol):
    name: str

    async def validate_email(self, address: str) -> ValidationOutcome:  # pragma: no cover - protocol
        ...


class PhoneValidator(Protocol):
    name: str

    async def validate_phone(self, number: str, region_hint: Optional[str] = None) -> ValidationOutcome:  # pragma: no cover - protocol
        ...


class HttpProvider:
    """Base class for vendor adapters talking JSON over HTTP.

    Parameters
    ----------
    api_key:
        Vendor credential. Calls fail with :class:`ProviderError` when empty.
    base_url:
        Overrides the vendor's default API root.
    client:
        Optional shared :class:`httpx.AsyncClient`. When omitted a short-lived
        client is opened for every request.
    timeout:
        Per-request timeout in seconds.
    """

    name = "http"
    BASE_URL = ""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.api_key = api_key or ""
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self._client = client
        self._timeout = timeout

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ProviderError(self.name, "API key not configured")
        return self.api_key

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        LOGGER.debug("%s %s %s", self.name, method, url)
        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, params=params, json=json, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(method, url, params=params, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                self.name,
                f"HTTP {exc.response.status_code}: {exc.response.text[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(self.name, f"{exc.__class__.__name__}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(self.name, "Malformed JSON payload") from exc
        if not isinstance(payload, dict):
            raise ProviderError(self.name, "Unexpected payload shape")
        return payload


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "EmailValidator",
    "HttpProvider",
    "PeopleEnrichmentProvider",
    "PhoneValidator",
    "ProfileEnrichmentProvider",
    "ProfileSearchProvider",
]

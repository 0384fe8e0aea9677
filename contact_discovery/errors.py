"""Exception hierarchy shared across the contact discovery toolkit."""
from __future__ import annotations

from typing import Optional


class ContactDiscoveryError(Exception):
    """Base class for errors raised by :mod:`contact_discovery`."""


class InvalidQueryError(ContactDiscoveryError, ValueError):
    """Raised when a discovery request is missing required person details."""


class ProviderError(ContactDiscoveryError):
    """Raised by provider adapters when a vendor call fails or returns garbage."""

    def __init__(self, provider: str, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.status_code = status_code


__all__ = ["ContactDiscoveryError", "InvalidQueryError", "ProviderError"]

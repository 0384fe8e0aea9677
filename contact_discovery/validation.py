"""Local and provider-backed validation of the top-ranked contact fields."""
from __future__ import annotations

import logging
import re
from typing import Optional

from .geo import region_country_code
from .merge import digits_only
from .models import ValidationOutcome

LOGGER = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DISPOSABLE_DOMAINS = frozenset(
    {
        "tempmail.com",
        "throwaway.com",
        "mailinator.com",
        "guerrillamail.com",
        "temp-mail.org",
        "10minutemail.com",
        "fakeinbox.com",
    }
)

_MOBILE_PATTERNS = {
    "AU": re.compile(r"^(?:61|0)?4\d{8}$"),
    "US": re.compile(r"^1?[2-9]\d{9}$"),
    "GB": re.compile(r"^(?:44)?7\d{9}$"),
    "NZ": re.compile(r"^(?:64)?2\d{7,9}$"),
}


def is_valid_email_format(address: str) -> bool:
    return bool(_EMAIL_PATTERN.match(address or ""))


def is_disposable_email(address: str) -> bool:
    domain = (address or "").rpartition("@")[2].lower()
    return domain in DISPOSABLE_DOMAINS


def phone_region_hint(number: str, location: Optional[str]) -> Optional[str]:
    """Pick an ISO country hint for phone validation."""

    country = region_country_code(location)
    if country:
        return country
    stripped = (number or "").strip()
    if stripped.startswith("+1") or stripped.startswith("1"):
        return "US"
    if stripped.startswith("+44"):
        return "GB"
    return None


def fallback_phone_validation(number: str, region_hint: Optional[str]) -> ValidationOutcome:
    digits = digits_only(number)
    pattern = _MOBILE_PATTERNS.get(region_hint or "")
    matched = bool(pattern and pattern.match(digits)) or len(digits) >= 10
    return ValidationOutcome(
        value=number,
        valid=matched,
        confidence=0.6 if matched else 0.2,
        reason="pattern_valid" if matched else "pattern_invalid",
    )


async def validate_email_field(address: str, validator=None) -> ValidationOutcome:
    """Validate an email locally, then with ``validator`` when one is configured."""

    if not is_valid_email_format(address):
        return ValidationOutcome(value=address, valid=False, confidence=0.0, reason="invalid_format")
    if is_disposable_email(address):
        return ValidationOutcome(value=address, valid=True, confidence=0.3, reason="disposable")
    if validator is None:
        return ValidationOutcome(value=address, valid=True, confidence=0.6, reason="format_valid")

    try:
        return await validator.validate_email(address)
    except Exception as exc:
        LOGGER.warning("Email validation skipped for %s: %s", address, exc)
        return ValidationOutcome(value=address, valid=False, reason=str(exc), skipped=True)


async def validate_phone_field(number: str, location: Optional[str] = None, validator=None) -> ValidationOutcome:
    """Validate a phone number's shape, then with ``validator`` when configured."""

    digits = digits_only(number)
    if len(digits) < 8 or len(digits) > 15:
        return ValidationOutcome(value=number, valid=False, confidence=0.0, reason="invalid_length")

    region_hint = phone_region_hint(number, location)
    if validator is None:
        return fallback_phone_validation(number, region_hint)

    try:
        return await validator.validate_phone(number, region_hint)
    except Exception as exc:
        LOGGER.warning("Phone validation skipped for %s: %s", number, exc)
        return ValidationOutcome(value=number, valid=False, reason=str(exc), skipped=True)


__all__ = [
    "DISPOSABLE_DOMAINS",
    "fallback_phone_validation",
    "is_disposable_email",
    "is_valid_email_format",
    "phone_region_hint",
    "validate_email_field",
    "validate_phone_field",
]

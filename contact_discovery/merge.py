"""Utility helpers for merging contact fields reported by multiple providers."""
from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional

import phonenumbers

from .models import EMAIL, PHONE, ConsolidatedFieldRecord, ContactFieldRecord

LOGGER = logging.getLogger(__name__)

AGREEMENT_BONUS = 0.1

_PHONE_PUNCTUATION = re.compile(r"[\s\-\(\)\.]")


def digits_only(value: str) -> str:
    return "".join(c for c in value if c.isdigit())


def phone_key(value: str, default_region: Optional[str] = None) -> str:
    """Return the E.164 digits of a phone number, or its bare digits.

    ``default_region`` is an ISO country code ("AU", "NZ") used to read
    numbers written in national form. Numbers that cannot be parsed fall
    back to their digits so they still merge with identical renderings.
    """

    cleaned = _PHONE_PUNCTUATION.sub("", value or "")
    if not cleaned:
        return ""
    try:
        parsed = phonenumbers.parse(cleaned, default_region)
    except phonenumbers.NumberParseException:
        LOGGER.debug("Unparseable phone number %r for region %s", value, default_region)
        return digits_only(cleaned)
    return digits_only(phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164))


def merge_key(channel: str, value: str, default_region: Optional[str] = None) -> str:
    """Return the value used to recognise the same contact across providers."""

    value = (value or "").strip()
    if channel == EMAIL:
        return value.lower()
    if channel == PHONE:
        return phone_key(value, default_region)
    return value.lower()


def consolidate_fields(
    records: Iterable[ContactFieldRecord],
    channel: str,
    *,
    default_region: Optional[str] = None,
) -> List[ConsolidatedFieldRecord]:
    """Merge records sharing a merge key, best first.

    The first record of each group is the base. Every contributor is appended
    to ``sources`` and each record beyond the first adds a fixed bonus on top
    of the best confidence seen so far, so values that several providers agree
    on outrank single-source values.
    """

    aggregated: Dict[str, ConsolidatedFieldRecord] = {}
    ordered_keys: List[str] = []

    for record in records:
        if record is None or record.channel != channel:
            continue
        key = merge_key(channel, record.value, default_region)
        if not key:
            continue
        if key not in aggregated:
            aggregated[key] = ConsolidatedFieldRecord(
                channel=channel,
                value=record.value.strip(),
                subtype=record.subtype,
                confidence=record.confidence,
                sources=[record.source],
                verified=bool(record.verified),
            )
            ordered_keys.append(key)
        else:
            merged = aggregated[key]
            merged.sources.append(record.source)
            merged.confidence = max(merged.confidence, record.confidence)
            merged.boost(AGREEMENT_BONUS)
            if record.verified:
                merged.verified = True

    ordered = [aggregated[key] for key in ordered_keys]
    ordered.sort(key=lambda item: item.confidence, reverse=True)
    return ordered


__all__ = ["AGREEMENT_BONUS", "consolidate_fields", "digits_only", "merge_key", "phone_key"]

"""Geographic plausibility checks for phone numbers."""
from __future__ import annotations

import logging
import re
from typing import List, Optional

from .merge import phone_key
from .models import ConsolidatedFieldRecord, clamp_confidence

LOGGER = logging.getLogger(__name__)

_AU_NZ_PATTERN = re.compile(
    r"\b(australia|au|new zealand|nz|sydney|melbourne|brisbane|perth|adelaide|auckland"
    r"|wellington|hobart|canberra|gold coast|newcastle)\b",
    re.IGNORECASE,
)
_NZ_PATTERN = re.compile(r"\b(new zealand|nz|auckland|wellington)\b", re.IGNORECASE)

LOCAL_PREFIXES = ("61", "04", "64")
NON_LOCAL_PENALTY = 0.3
MIN_CONFIDENCE = 0.1


def is_au_nz_region(location: Optional[str]) -> bool:
    return bool(location and _AU_NZ_PATTERN.search(location))


def region_country_code(location: Optional[str]) -> Optional[str]:
    """Return ``"NZ"`` or ``"AU"`` for AU/NZ locations, otherwise ``None``."""

    if not is_au_nz_region(location):
        return None
    return "NZ" if _NZ_PATTERN.search(location or "") else "AU"


def apply_geo_plausibility(
    phones: List[ConsolidatedFieldRecord], location: Optional[str]
) -> List[ConsolidatedFieldRecord]:
    """Down-weight numbers that contradict an AU/NZ subject region.

    Numbers are compared in normalised form, so national and international
    renderings of one number get the same verdict. Flagged numbers are kept;
    a contact may legitimately hold numbers in more than one region.
    """

    if not is_au_nz_region(location):
        return phones

    region = region_country_code(location)
    for record in phones:
        if phone_key(record.value, region).startswith(LOCAL_PREFIXES):
            continue
        lowered = max(record.confidence - NON_LOCAL_PENALTY, MIN_CONFIDENCE)
        record.confidence = clamp_confidence(min(record.confidence, lowered))
        record.non_local = True
        LOGGER.info("Non-local phone flagged (confidence reduced): %s", record.value)

    phones.sort(key=lambda item: item.confidence, reverse=True)
    return phones


__all__ = [
    "apply_geo_plausibility",
    "is_au_nz_region",
    "region_country_code",
]

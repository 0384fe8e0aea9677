"""Company website lookup from web search results."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, List, Optional
from urllib.parse import urlparse

LOGGER = logging.getLogger(__name__)

# Directories, social networks and news sites that rank for company names.
NON_COMPANY_DOMAINS = (
    "linkedin.com",
    "facebook.com",
    "twitter.com",
    "instagram.com",
    "youtube.com",
    "wikipedia.org",
    "crunchbase.com",
    "bloomberg.com",
    "reuters.com",
    "forbes.com",
    "glassdoor.com",
    "indeed.com",
    "zoominfo.com",
    "dnb.com",
    "google.com",
    "bing.com",
)
PREFERRED_SUFFIXES = (".com", ".com.au", ".co", ".io")
TOP_CANDIDATES = 3


def company_domain_queries(company: str) -> List[str]:
    return [f'"{company}" official website', f"{company} company website"]


def url_domain(url: str) -> Optional[str]:
    """Return the host of ``url`` without a leading ``www.``."""

    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    if host.startswith("www."):
        host = host[4:]
    return host


def is_company_domain(domain: str) -> bool:
    return not any(blocked in domain for blocked in NON_COMPANY_DOMAINS)


def pick_company_domain(urls: Iterable[str]) -> Optional[str]:
    """Choose the most frequent company-looking domain among search result URLs.

    Of the three most frequent domains the first with a common commercial
    suffix wins; otherwise the most frequent one. Ties keep first-seen order.
    """

    counts: Counter = Counter()
    for url in urls:
        domain = url_domain(url)
        if domain and is_company_domain(domain):
            counts[domain] += 1
    if not counts:
        return None

    ranked = [domain for domain, _ in counts.most_common(TOP_CANDIDATES)]
    for domain in ranked:
        if domain.endswith(PREFERRED_SUFFIXES):
            return domain
    return ranked[0]


__all__ = [
    "NON_COMPANY_DOMAINS",
    "company_domain_queries",
    "is_company_domain",
    "pick_company_domain",
    "url_domain",
]

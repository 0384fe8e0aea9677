from __future__ import annotations

from contact_discovery.domains import company_domain_queries, pick_company_domain, url_domain


def test_queries_quote_the_company_first() -> None:
    assert company_domain_queries("Acme Pty Ltd") == [
        '"Acme Pty Ltd" official website',
        "Acme Pty Ltd company website",
    ]


def test_url_domain_strips_www_and_rejects_non_urls() -> None:
    assert url_domain("https://www.Acme.com.au/contact?x=1") == "acme.com.au"
    assert url_domain("http://shop.acme.io") == "shop.acme.io"
    assert url_domain("not a url") is None


def test_most_frequent_company_domain_wins() -> None:
    urls = [
        "https://acme.net/",
        "https://www.linkedin.com/company/acme",
        "https://acme.net/about",
        "https://en.wikipedia.org/wiki/Acme",
        "https://www.acme.net/team",
    ]

    assert pick_company_domain(urls) == "acme.net"


def test_preferred_suffix_beats_higher_count_within_top_three() -> None:
    urls = ["https://acme.net", "https://acme.net/a", "https://acme.org", "https://acme.io"]

    assert pick_company_domain(urls) == "acme.io"


def test_preferred_suffix_outside_top_three_ignored() -> None:
    urls = (
        ["https://acme.net"] * 3
        + ["https://acme.org"] * 2
        + ["https://acme.de"] * 2
        + ["https://acme.com"]
    )

    assert pick_company_domain(urls) == "acme.net"


def test_only_directory_sites_yield_nothing() -> None:
    urls = ["https://www.crunchbase.com/organization/acme", "https://au.linkedin.com/company/acme"]

    assert pick_company_domain(urls) is None
    assert pick_company_domain([]) is None

from __future__ import annotations

from typing import Dict, Optional

import pytest

from contact_discovery.errors import ProviderError
from contact_discovery.models import EnrichmentResponse, PersonDescriptor
from contact_discovery.store import InMemoryStore
from contact_discovery.watchlist import (
    DuplicateContactError,
    EntryNotFoundError,
    Watchlist,
    check_watchlist,
)


class RoleLookup:
    """People lookup returning a fixed role per family name."""

    name = "roles"

    def __init__(self, roles: Dict[str, Optional[tuple]]) -> None:
        self._roles = roles

    async def enrich_person(self, person: PersonDescriptor) -> EnrichmentResponse:
        role = self._roles.get(person.last_name)
        if role is None:
            raise ProviderError(self.name, "HTTP 404")
        title, company = role
        return EnrichmentResponse(title=title, company=company)


def _watchlist() -> Watchlist:
    return Watchlist(InMemoryStore())


def test_add_and_remove_entries() -> None:
    watchlist = _watchlist()

    entry = watchlist.add("Jane", "Doe", company="TechCorp", title="CFO")

    assert len(watchlist) == 1
    assert len(entry.id) == 12
    assert (entry.last_title, entry.last_company) == ("CFO", "TechCorp")
    assert watchlist.entries()[0] == entry

    removed = watchlist.remove(entry.id)
    assert removed.id == entry.id
    assert len(watchlist) == 0

    with pytest.raises(EntryNotFoundError):
        watchlist.remove(entry.id)


def test_duplicates_detected_by_name_company_url_or_email() -> None:
    watchlist = _watchlist()
    watchlist.add(
        "Jane",
        "Doe",
        company="TechCorp",
        profile_url="https://www.linkedin.com/in/jane-doe",
        email="jane@techcorp.com",
    )

    with pytest.raises(DuplicateContactError) as excinfo:
        watchlist.add("JANE", "doe", company="techcorp")
    assert excinfo.value.existing.first_name == "Jane"

    with pytest.raises(DuplicateContactError):
        watchlist.add("J", "Doe", profile_url="https://www.linkedin.com/in/jane-doe")
    with pytest.raises(DuplicateContactError):
        watchlist.add("J", "Doe", email="jane@techcorp.com")

    watchlist.add("Jane", "Doe", company="OtherCorp")
    assert len(watchlist) == 2


def test_check_for_changes_compares_case_insensitively() -> None:
    entry = _watchlist().add("Jane", "Doe", company="TechCorp", title="CFO")

    assert Watchlist.check_for_changes(entry, "cfo", "TECHCORP") == []
    assert Watchlist.check_for_changes(entry, None, None) == []
    assert Watchlist.check_for_changes(entry, "CEO", "NewCo") == [
        {"type": "title", "from": "CFO", "to": "CEO"},
        {"type": "company", "from": "TechCorp", "to": "NewCo"},
    ]


@pytest.mark.asyncio
async def test_check_watchlist_records_changes_and_errors() -> None:
    watchlist = _watchlist()
    mover = watchlist.add("Jane", "Doe", company="TechCorp", title="CFO")
    stayer = watchlist.add("John", "Smith", company="Acme", title="CTO")
    missing = watchlist.add("Ann", "Lee", company="Initech", title="COO")
    lookup = RoleLookup({"Doe": ("CEO", "NewCo"), "Smith": ("CTO", "Acme"), "Lee": None})

    report = await check_watchlist(watchlist, lookup)

    assert report.checked == 2
    assert [change["id"] for change in report.changes] == [mover.id]
    assert report.errors == [{"id": missing.id, "name": "Ann Lee", "error": "roles: HTTP 404"}]
    assert watchlist.last_checked == report.checked_at

    entries = {entry.id: entry for entry in watchlist.entries()}
    assert entries[mover.id].last_title == "CEO"
    assert entries[mover.id].last_company == "NewCo"
    assert len(entries[mover.id].change_history) == 1
    assert entries[stayer.id].change_history == []
    assert entries[stayer.id].last_checked is not None
    assert entries[missing.id].last_checked is None
    assert [entry.id for entry in watchlist.entries_with_changes()] == [mover.id]

    watchlist.clear_history()
    assert watchlist.entries_with_changes() == []


def test_update_entry_unknown_id() -> None:
    with pytest.raises(EntryNotFoundError):
        _watchlist().update_entry("nope", title="CEO")

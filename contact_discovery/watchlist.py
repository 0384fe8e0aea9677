"""Job-change alerts: tracked contacts whose title or company is re-checked over time."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .errors import ContactDiscoveryError
from .models import PersonDescriptor, WatchlistEntry
from .store import KeyValueStore

LOGGER = logging.getLogger(__name__)

WATCHLIST_KEY = "watchlist"


class DuplicateContactError(ContactDiscoveryError):
    """Raised when a contact is already on the watchlist."""

    def __init__(self, existing: WatchlistEntry) -> None:
        super().__init__(f"Contact already in watchlist: {existing.full_name}")
        self.existing = existing


class EntryNotFoundError(ContactDiscoveryError, KeyError):
    """Raised when no watchlist entry carries the requested id."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").lower() == (b or "").lower()


@dataclass
class WatchlistCheckReport:
    checked: int = 0
    changes: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    checked_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "checked": self.checked,
            "changes": list(self.changes),
            "errors": list(self.errors),
            "checked_at": self.checked_at,
        }


class Watchlist:
    """Watchlist persisted as one document in an injected key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def _load(self) -> Dict[str, Any]:
        data = self._store.get(WATCHLIST_KEY) or {}
        return {"contacts": list(data.get("contacts") or []), "last_checked": data.get("last_checked")}

    def _save(self, data: Dict[str, Any]) -> None:
        self._store.set(WATCHLIST_KEY, data)

    def entries(self) -> List[WatchlistEntry]:
        return [WatchlistEntry.from_dict(item) for item in self._load()["contacts"]]

    @property
    def last_checked(self) -> Optional[str]:
        return self._load()["last_checked"]

    def __len__(self) -> int:
        return len(self._load()["contacts"])

    def find_duplicate(
        self,
        first_name: str,
        last_name: str,
        company: Optional[str] = None,
        profile_url: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[WatchlistEntry]:
        for entry in self.entries():
            if profile_url and entry.profile_url == profile_url:
                return entry
            if email and entry.email == email:
                return entry
            if _same(entry.first_name, first_name) and _same(entry.last_name, last_name) and _same(entry.company, company):
                return entry
        return None

    def add(
        self,
        first_name: str,
        last_name: str,
        *,
        company: Optional[str] = None,
        title: Optional[str] = None,
        profile_url: Optional[str] = None,
        email: Optional[str] = None,
    ) -> WatchlistEntry:
        existing = self.find_duplicate(first_name, last_name, company, profile_url, email)
        if existing is not None:
            raise DuplicateContactError(existing)

        entry = WatchlistEntry(
            id=uuid.uuid4().hex[:12],
            first_name=first_name,
            last_name=last_name,
            company=company,
            title=title,
            profile_url=profile_url,
            email=email,
            added_at=_now(),
            last_title=title,
            last_company=company,
        )
        data = self._load()
        data["contacts"].append(entry.to_dict())
        self._save(data)
        LOGGER.info("Added %s to watchlist (%d tracked)", entry.full_name, len(data["contacts"]))
        return entry

    def remove(self, entry_id: str) -> WatchlistEntry:
        data = self._load()
        for index, item in enumerate(data["contacts"]):
            if item.get("id") == entry_id:
                removed = data["contacts"].pop(index)
                self._save(data)
                return WatchlistEntry.from_dict(removed)
        raise EntryNotFoundError(entry_id)

    @staticmethod
    def check_for_changes(
        entry: WatchlistEntry, title: Optional[str] = None, company: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Compare a freshly observed role against the last one recorded."""

        changes: List[Dict[str, Any]] = []
        if title and entry.last_title and not _same(title, entry.last_title):
            changes.append({"type": "title", "from": entry.last_title, "to": title})
        if company and entry.last_company and not _same(company, entry.last_company):
            changes.append({"type": "company", "from": entry.last_company, "to": company})
        return changes

    def update_entry(
        self,
        entry_id: str,
        *,
        title: Optional[str] = None,
        company: Optional[str] = None,
        profile_url: Optional[str] = None,
        changes: Iterable[Dict[str, Any]] = (),
    ) -> WatchlistEntry:
        data = self._load()
        for item in data["contacts"]:
            if item.get("id") != entry_id:
                continue
            entry = WatchlistEntry.from_dict(item)
            changes = list(changes)
            if changes:
                entry.change_history.append({"date": _now(), "changes": changes})
            if title:
                entry.last_title = title
            if company:
                entry.last_company = company
            if profile_url:
                entry.profile_url = profile_url
            entry.last_checked = _now()
            item.clear()
            item.update(entry.to_dict())
            self._save(data)
            return entry
        raise EntryNotFoundError(entry_id)

    def mark_checked(self) -> str:
        data = self._load()
        data["last_checked"] = _now()
        self._save(data)
        return data["last_checked"]

    def entries_with_changes(self) -> List[WatchlistEntry]:
        return [entry for entry in self.entries() if entry.change_history]

    def clear_history(self) -> None:
        data = self._load()
        for item in data["contacts"]:
            item["change_history"] = []
        self._save(data)


async def check_watchlist(watchlist: Watchlist, lookup: Any) -> WatchlistCheckReport:
    """Poll ``lookup`` (a people-enrichment provider) for every tracked contact.

    A failing lookup is recorded against its entry and the run continues.
    """

    report = WatchlistCheckReport()
    for entry in watchlist.entries():
        person = PersonDescriptor(
            first_name=entry.first_name,
            last_name=entry.last_name,
            company=entry.last_company or entry.company,
            profile_url=entry.profile_url,
        )
        try:
            response = await lookup.enrich_person(person)
        except Exception as exc:
            LOGGER.warning("Watchlist check failed for %s: %s", entry.full_name, exc)
            report.errors.append({"id": entry.id, "name": entry.full_name, "error": str(exc)})
            continue

        changes = Watchlist.check_for_changes(entry, response.title, response.company)
        watchlist.update_entry(
            entry.id,
            title=response.title,
            company=response.company,
            profile_url=response.profile_url,
            changes=changes,
        )
        report.checked += 1
        if changes:
            LOGGER.info("Role change detected for %s: %s", entry.full_name, changes)
            report.changes.append({"id": entry.id, "name": entry.full_name, "changes": changes})

    report.checked_at = watchlist.mark_checked()
    return report


__all__ = [
    "DuplicateContactError",
    "EntryNotFoundError",
    "Watchlist",
    "WatchlistCheckReport",
    "check_watchlist",
]

"""Data models used by bulk upload and compliance utilities."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class BulkContact:
    """One contact row imported from a spreadsheet."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    domain: Optional[str] = None
    email: Optional[str] = None
    profile_url: Optional[str] = None
    title: Optional[str] = None
    location: Optional[str] = None
    do_not_contact: bool = False
    opted_out: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return " ".join(filter(None, [self.first_name, self.last_name])).strip()

    def to_query(self) -> Dict[str, Any]:
        """Mapping accepted by :func:`contact_discovery.parsing.parse_query`."""

        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "company": self.company,
            "domain": self.domain,
            "title": self.title,
            "location": self.location,
            "profile_url": self.profile_url,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ComplianceIssue:
    row: int
    contact: str
    issues: List[str] = field(default_factory=list)


@dataclass(slots=True)
class ComplianceReport:
    """Rows cleared for enrichment and the rows held back, with reasons."""

    valid_contacts: List[BulkContact] = field(default_factory=list)
    issues: List[ComplianceIssue] = field(default_factory=list)
    total_rows: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid_contacts": [contact.to_dict() for contact in self.valid_contacts],
            "issues": [asdict(issue) for issue in self.issues],
            "total_rows": self.total_rows,
        }


__all__ = ["BulkContact", "ComplianceIssue", "ComplianceReport"]

"""Pre-enrichment compliance screening for bulk uploads."""
from __future__ import annotations

import logging
from typing import Iterable, Set, Tuple

from .models import BulkContact, ComplianceIssue, ComplianceReport

LOGGER = logging.getLogger(__name__)

# Spreadsheet row numbers: the header occupies row 1.
FIRST_DATA_ROW = 2


def _identity(contact: BulkContact) -> Tuple[str, str, str]:
    return (
        (contact.first_name or "").lower(),
        (contact.last_name or "").lower(),
        (contact.company or "").lower(),
    )


def check_compliance(contacts: Iterable[BulkContact]) -> ComplianceReport:
    """Split contacts into those safe to enrich and those with issues.

    Duplicates are judged against rows already accepted, so the first clean
    occurrence of a person passes and later copies are flagged.
    """

    report = ComplianceReport()
    accepted: Set[Tuple[str, str, str]] = set()

    for index, contact in enumerate(contacts):
        report.total_rows += 1
        problems = []
        if not (contact.first_name or "").strip():
            problems.append("Missing first name")
        if not (contact.last_name or "").strip():
            problems.append("Missing last name")
        if not any((value or "").strip() for value in (contact.company, contact.domain, contact.profile_url)):
            problems.append("Need company, domain, or LinkedIn")
        if contact.do_not_contact:
            problems.append("Do Not Contact")
        if contact.opted_out:
            problems.append("Opted out")
        if _identity(contact) in accepted:
            problems.append("Duplicate")

        if problems:
            report.issues.append(
                ComplianceIssue(row=index + FIRST_DATA_ROW, contact=contact.full_name, issues=problems)
            )
        else:
            accepted.add(_identity(contact))
            report.valid_contacts.append(contact)

    LOGGER.info("Compliance: %d valid, %d with issues", len(report.valid_contacts), len(report.issues))
    return report


__all__ = ["FIRST_DATA_ROW", "check_compliance"]

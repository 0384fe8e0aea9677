"""Export discovery results as CRM-ready spreadsheets."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..merge import digits_only
from ..models import ConsolidatedFieldRecord, DiscoveryResult

PathLike = Union[str, Path]

CRM_COLUMNS = [
    "first_name",
    "last_name",
    "company",
    "title",
    "domain",
    "email_1",
    "email_1_source",
    "email_1_verified",
    "phone_1",
    "phone_1_source",
    "phone_1_dnc",
    "linkedin",
    "sources",
    "enriched_at",
]

DNC_NOTE = "Verify DNC"
_AU_PREFIXES = ("61", "04")


def export_results(
    results: Sequence[DiscoveryResult],
    path: PathLike,
    *,
    sheet_name: str = "Results",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write discovery results to a CSV, TSV or Excel file."""

    dataframe = results_to_dataframe(results)
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def results_to_csv(results: Sequence[DiscoveryResult]) -> str:
    return results_to_dataframe(results).to_csv(index=False)


def results_to_dataframe(results: Sequence[DiscoveryResult]) -> pd.DataFrame:
    """Convert discovery results into a :class:`pandas.DataFrame` with CRM columns."""

    return pd.DataFrame([_result_to_row(result) for result in results], columns=CRM_COLUMNS)


def dnc_note(phone: Optional[ConsolidatedFieldRecord]) -> str:
    """Australian numbers must be checked against the Do Not Call register."""

    if phone is None:
        return ""
    return DNC_NOTE if digits_only(phone.value).startswith(_AU_PREFIXES) else ""


def _result_to_row(result: DiscoveryResult) -> MutableMapping[str, object]:
    person = result.person
    email = result.top_email
    phone = result.top_phone
    return {
        "first_name": person.first_name,
        "last_name": person.last_name,
        "company": person.company or "",
        "title": person.title or "",
        "domain": person.domain or "",
        "email_1": email.value if email else "",
        "email_1_source": _join_list(email.sources) if email else "",
        "email_1_verified": "Yes" if email and email.verified else "",
        "phone_1": phone.value if phone else "",
        "phone_1_source": _join_list(phone.sources) if phone else "",
        "phone_1_dnc": dnc_note(phone),
        "linkedin": result.profile_url or "",
        "sources": _join_list(_contributing_sources(result)),
        "enriched_at": result.metadata.timestamp,
    }


def _contributing_sources(result: DiscoveryResult) -> List[str]:
    seen: List[str] = []
    for record in [*result.emails, *result.phones]:
        for source in record.sources:
            if source not in seen:
                seen.append(source)
    return seen


def _join_list(values: Iterable[Optional[str]]) -> str:
    cleaned: List[str] = []
    for value in values:
        if not value:
            continue
        text = str(value).strip()
        if text:
            cleaned.append(text)
    return ", ".join(cleaned)


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["CRM_COLUMNS", "DNC_NOTE", "dnc_note", "export_results", "results_to_csv", "results_to_dataframe"]

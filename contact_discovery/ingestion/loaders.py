"""Utilities for loading contact lists from CSV text and spreadsheets."""
from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Union

import pandas as pd

from .models import BulkContact

PathLike = Union[str, Path]

_FIELD_SYNONYMS: Mapping[str, Sequence[str]] = {
    "first_name": ("firstname", "first_name", "first name", "first", "given name"),
    "last_name": ("lastname", "last_name", "last name", "surname", "family name"),
    "company": ("company", "company name", "organisation", "organization", "employer"),
    "domain": ("domain", "website", "company domain"),
    "email": ("email", "email address"),
    "profile_url": ("linkedin", "linkedin url", "profile url", "profile_url"),
    "title": ("title", "job title", "position"),
    "location": ("location", "region", "city"),
    "do_not_contact": ("donotcontact", "do not contact", "dnc"),
    "opted_out": ("optedout", "opted out", "opt out"),
}

_REQUIRED_FIELDS = ("first_name", "last_name")
_TRUTHY = {"true", "yes", "y", "1"}


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


class MissingColumnsError(ValueError):
    """Raised when the header lacks the first and last name columns."""


def load_contacts(
    path: PathLike,
    *,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[BulkContact]:
    """Load contact rows from a CSV, TSV or Excel file.

    Parameters
    ----------
    path:
        Path to the file to be loaded.
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel`. Ignored for CSV files.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv` or
        :func:`pandas.read_excel`.
    """

    return contacts_from_dataframe(_read_dataframe(path, sheet_name=sheet_name, loader_kwargs=loader_kwargs))


def parse_contacts_csv(text: str) -> List[BulkContact]:
    """Parse pasted or uploaded CSV text into contacts."""

    if not text or not text.strip():
        raise MissingColumnsError("Need a header row and at least one data row")
    dataframe = pd.read_csv(io.StringIO(text.strip()), dtype=str, keep_default_na=False, skipinitialspace=True)
    return contacts_from_dataframe(dataframe)


def contacts_from_dataframe(dataframe: pd.DataFrame) -> List[BulkContact]:
    resolved = resolve_columns(dataframe.columns)
    missing = [name for name in _REQUIRED_FIELDS if name not in resolved]
    if missing:
        raise MissingColumnsError(
            f"Need firstName and lastName columns (missing: {', '.join(missing)})"
        )

    known_columns = set(resolved.values())
    contacts: List[BulkContact] = []
    for _, row in dataframe.iterrows():
        if _row_is_empty(row):
            continue
        values = {name: _clean_text(row[column]) for name, column in resolved.items()}
        metadata = {
            str(column): _clean_text(value)
            for column, value in row.items()
            if column not in known_columns and _clean_text(value) is not None
        }
        contacts.append(
            BulkContact(
                first_name=values.get("first_name"),
                last_name=values.get("last_name"),
                company=values.get("company"),
                domain=values.get("domain"),
                email=values.get("email"),
                profile_url=values.get("profile_url"),
                title=values.get("title"),
                location=values.get("location"),
                do_not_contact=_is_truthy(values.get("do_not_contact")),
                opted_out=_is_truthy(values.get("opted_out")),
                metadata=metadata,
            )
        )
    return contacts


def resolve_columns(columns: Iterable[Any]) -> Dict[str, Any]:
    """Map each known field to the first header that names it."""

    resolved: Dict[str, Any] = {}
    for column in columns:
        key = _header_key(column)
        for field_name, synonyms in _FIELD_SYNONYMS.items():
            if field_name in resolved:
                continue
            if any(_header_key(synonym) == key for synonym in synonyms):
                resolved[field_name] = column
                break
    return resolved


def _header_key(value: Any) -> str:
    return re.sub(r"[^a-z0-9]", "", str(value).lower())


def _read_dataframe(
    path: PathLike,
    *,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    path_obj = Path(path)
    suffix = path_obj.suffix.lower()
    loader_kwargs.setdefault("dtype", str)

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            loader_kwargs.setdefault("sep", "\t")
        return pd.read_csv(path_obj, **loader_kwargs)

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        return pd.read_excel(path_obj, sheet_name=sheet_name, engine=loader_kwargs.pop("engine", None) or "openpyxl", **loader_kwargs)

    raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")


def _row_is_empty(row: pd.Series) -> bool:
    return all(_clean_text(value) is None for value in row.values)


def _clean_text(value: Any) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = str(value).strip().strip("\"'").strip()
    return text or None


def _is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


__all__ = [
    "MissingColumnsError",
    "UnsupportedFileTypeError",
    "contacts_from_dataframe",
    "load_contacts",
    "parse_contacts_csv",
    "resolve_columns",
]

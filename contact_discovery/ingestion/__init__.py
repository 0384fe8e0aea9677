"""Bulk upload, compliance screening and CRM export of contact lists."""

from .compliance import check_compliance
from .exporters import CRM_COLUMNS, export_results, results_to_csv, results_to_dataframe
from .loaders import MissingColumnsError, UnsupportedFileTypeError, load_contacts, parse_contacts_csv
from .models import BulkContact, ComplianceIssue, ComplianceReport

__all__ = [
    "CRM_COLUMNS",
    "BulkContact",
    "ComplianceIssue",
    "ComplianceReport",
    "MissingColumnsError",
    "UnsupportedFileTypeError",
    "check_compliance",
    "export_results",
    "load_contacts",
    "parse_contacts_csv",
    "results_to_csv",
    "results_to_dataframe",
]

"""
Data access and parsing layer.

This package contains the export parsers, the file loader and conversions
between records and their storage/tabular forms.
"""

from .base import ParserProtocol
from .csv_parser import CsvParser, format_csv_parse_errors, parse_csv
from .loader import RecordLoader, assign_ids
from .storage import from_storage_row, records_to_frame, to_storage_row
from .text_parser import (
    ScanState,
    TextParser,
    classify_activity,
    format_parse_errors,
    parse_text,
    scan_line,
)

__all__ = [
    "CsvParser",
    "ParserProtocol",
    "RecordLoader",
    "ScanState",
    "TextParser",
    "assign_ids",
    "classify_activity",
    "format_csv_parse_errors",
    "format_parse_errors",
    "from_storage_row",
    "parse_csv",
    "parse_text",
    "records_to_frame",
    "scan_line",
    "to_storage_row",
]

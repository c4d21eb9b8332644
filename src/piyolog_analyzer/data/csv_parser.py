"""
Piyolog CSV export parser.

The CSV variant carries one already-typed event per row::

    timestamp,activity_type,duration_minutes,quantity_ml,notes
    2025-04-10T11:42:00,feeding,20,,左10分 右10分

It produces the same ``Record`` shape as the text parser so the analytics are
format-agnostic; only its error vocabulary differs (row + field instead of
line + raw text).
"""

import io
import logging
import math
import re
from datetime import datetime

import pandas as pd

from ..constants import CSVConstants, ExportMarkers
from ..models import (
    ActivityType,
    CsvParseError,
    CsvParseResult,
    Record,
    RecordMetadata,
)
from ..settings import Settings

logger = logging.getLogger(__name__)

# Decimal or exponent notation only; nan, inf and digit separators are rejected.
NUMERIC_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
ISO_DATE_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}")


def validate_headers(headers: list[str]) -> list[CsvParseError]:
    """Report every required header missing from ``headers``."""
    normalized = {h.strip().lower() for h in headers}
    return [
        CsvParseError(
            row=0, field=expected, message=f"Missing required header: {expected}"
        )
        for expected in CSVConstants.EXPECTED_HEADERS
        if expected not in normalized
    ]


def parse_timestamp(value: str) -> datetime | None:
    """
    Parse an ISO 8601 timestamp cell, keeping wall-clock time for zoned values.

    Free-form words such as ``now`` or ``today`` are not timestamps.
    """
    if not value or not value.strip():
        return None

    text = value.strip()
    if not ISO_DATE_PREFIX.match(text):
        return None
    try:
        ts = pd.to_datetime(text, format="ISO8601")
    except (ValueError, TypeError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.to_pydatetime()


def parse_activity_type(value: str) -> ActivityType | None:
    """Parse an activity type cell (case-insensitive)."""
    if not value or not value.strip():
        return None
    try:
        return ActivityType(value.strip().lower())
    except ValueError:
        return None


def parse_numeric(value: str) -> float | None:
    """Parse an optional numeric cell; blanks, garbage and nan/inf become None."""
    if not value or not value.strip():
        return None

    text = value.strip()
    if not NUMERIC_PATTERN.fullmatch(text):
        return None
    parsed = float(text)
    # Exponents can still overflow to inf
    return parsed if math.isfinite(parsed) else None


def validate_numeric_range(
    value: float | None,
    field: str,
    minimum: float | None = None,
    maximum: float | None = None,
) -> str | None:
    """Return a message if ``value`` falls outside [minimum, maximum]."""
    if value is None:
        return None
    if minimum is not None and value < minimum:
        return f"{field} must be >= {minimum:g}, got {value:g}"
    if maximum is not None and value > maximum:
        return f"{field} must be <= {maximum:g}, got {value:g}"
    return None


def parse_csv_row(
    row: dict[str, str], row_number: int, metadata: RecordMetadata
) -> tuple[Record | None, list[CsvParseError]]:
    """
    Convert one CSV row into a record.

    A missing/invalid timestamp or activity type is critical and yields no
    record. Out-of-range numbers are reported and dropped from the record.

    Args:
        row: Mapping of normalized header to cell text
        row_number: 1-based data row number
        metadata: Import provenance stamped on the record

    Returns:
        Tuple of (record or None, errors for this row)
    """
    errors: list[CsvParseError] = []

    timestamp = parse_timestamp(row.get("timestamp", ""))
    if timestamp is None:
        errors.append(
            CsvParseError(
                row=row_number,
                field="timestamp",
                message="Invalid or missing timestamp",
                raw_data=row.get("timestamp"),
            )
        )

    activity_type = parse_activity_type(row.get("activity_type", ""))
    if activity_type is None:
        errors.append(
            CsvParseError(
                row=row_number,
                field="activity_type",
                message="Invalid or missing activity type",
                raw_data=row.get("activity_type"),
            )
        )

    numbers: dict[str, float | None] = {}
    for field, maximum in (
        ("duration_minutes", CSVConstants.MAX_DURATION_MINUTES),
        ("quantity_ml", CSVConstants.MAX_QUANTITY),
    ):
        value = parse_numeric(row.get(field, ""))
        message = validate_numeric_range(value, field, 0, maximum)
        if message:
            errors.append(
                CsvParseError(
                    row=row_number,
                    field=field,
                    message=message,
                    raw_data=row.get(field),
                )
            )
            value = None
        numbers[field] = value

    if timestamp is None or activity_type is None:
        return None, errors

    notes = (row.get("notes") or "").strip() or None
    record = Record(
        timestamp=timestamp,
        activity_type=activity_type,
        duration=numbers["duration_minutes"],
        quantity=numbers["quantity_ml"],
        notes=notes,
        metadata=metadata,
    )
    return record, errors


def parse_csv(
    content: str,
    filename: str = ExportMarkers.DEFAULT_FILENAME,
    *,
    imported_at: datetime | None = None,
) -> CsvParseResult:
    """
    Parse a Piyolog CSV export.

    Args:
        content: Full CSV text including the header row
        filename: Source identifier stored in each record's metadata
        imported_at: Import timestamp for record metadata (defaults to now)

    Returns:
        CsvParseResult with records (without ids) and row-level errors
    """
    try:
        df = pd.read_csv(
            io.StringIO(content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.warning(f"CSV parsing failed for {filename}: {e}")
        return CsvParseResult(
            errors=[CsvParseError(row=0, message=f"CSV parsing failed: {e}")]
        )

    df.columns = [str(c).strip().lower() for c in df.columns]
    header_errors = validate_headers(list(df.columns))
    if header_errors:
        logger.warning(f"Invalid CSV headers in {filename}")
        return CsvParseResult(errors=header_errors)

    metadata = RecordMetadata(
        imported_at=imported_at or datetime.now(), imported_filename=filename
    )
    records: list[Record] = []
    errors: list[CsvParseError] = []
    for index, row in enumerate(df.to_dict(orient="records")):
        record, row_errors = parse_csv_row(row, index + 1, metadata)
        if record is not None:
            records.append(record)
        errors.extend(row_errors)

    logger.debug(
        f"Parsed {filename}: {len(records)} records, {len(errors)} errors "
        f"from {len(df)} rows"
    )
    return CsvParseResult(
        records=records,
        errors=errors,
        total_rows=len(df),
        success_rows=len(records),
    )


def format_csv_parse_errors(errors: list[CsvParseError]) -> str:
    """Render CSV errors grouped by row ("Header" for row 0)."""
    if not errors:
        return ""

    grouped: dict[int, list[CsvParseError]] = {}
    for error in errors:
        grouped.setdefault(error.row, []).append(error)

    blocks = []
    for row, row_errors in grouped.items():
        label = "Header" if row == 0 else f"Row {row}"
        lines = [
            f"  - {e.field + ': ' if e.field else ''}{e.message}" for e in row_errors
        ]
        blocks.append(f"{label}:\n" + "\n".join(lines))
    return "\n\n".join(blocks)


class CsvParser:
    """Parser for Piyolog CSV exports, configured from settings."""

    def __init__(self, settings: Settings):
        """
        Initialize the parser.

        Args:
            settings: Application settings
        """
        self.settings = settings

    def parse(self, content: str, filename: str | None = None) -> CsvParseResult:
        """Parse CSV text; see ``parse_csv``."""
        return parse_csv(content, filename or self.settings.default_filename)

    def format_errors(self, errors: list[CsvParseError]) -> str:
        """Render errors grouped by row."""
        return format_csv_parse_errors(errors)

"""
Conversion between records and their flat storage/tabular representations.

Persistence must keep ``duration``/``quantity`` nullability intact: an absent
value and a zero value mean different things to the statistics.
"""

import logging
from datetime import datetime
from typing import Any

import pandas as pd

from ..models import ActivityType, Record, RecordMetadata

logger = logging.getLogger(__name__)

FRAME_COLUMNS = [
    "id",
    "timestamp",
    "date",
    "activity_type",
    "duration",
    "quantity",
    "notes",
    "imported_at",
    "imported_filename",
]


def to_storage_row(record: Record) -> dict[str, Any]:
    """
    Flatten a record into a storage row.

    Args:
        record: Record to store

    Returns:
        Dictionary with ISO-formatted timestamps and nullable numeric columns
    """
    return {
        "id": record.id,
        "timestamp": record.timestamp.isoformat(),
        "activity_type": record.activity_type.value,
        "duration_minutes": record.duration,
        "quantity_ml": record.quantity,
        "notes": record.notes,
        "imported_at": record.metadata.imported_at.isoformat(),
        "imported_filename": record.metadata.imported_filename,
    }


def from_storage_row(row: dict[str, Any]) -> Record:
    """
    Rebuild a record from a storage row.

    Args:
        row: Row as produced by ``to_storage_row``

    Returns:
        Equivalent record
    """
    return Record(
        id=row.get("id"),
        timestamp=datetime.fromisoformat(row["timestamp"]),
        activity_type=ActivityType(row["activity_type"]),
        duration=row.get("duration_minutes"),
        quantity=row.get("quantity_ml"),
        notes=row.get("notes"),
        metadata=RecordMetadata(
            imported_at=datetime.fromisoformat(row["imported_at"]),
            imported_filename=row.get("imported_filename"),
        ),
    )


def records_to_frame(records: list[Record]) -> pd.DataFrame:
    """
    Build a DataFrame view of records for vectorized aggregation.

    The ``date`` column holds the naive calendar date of each timestamp;
    ``activity_type`` holds the enum's string value; missing durations and
    quantities are NaN.

    Args:
        records: Records to tabulate

    Returns:
        DataFrame with one row per record, in input order
    """
    if not records:
        return pd.DataFrame(
            {
                "id": pd.Series(dtype=object),
                "timestamp": pd.Series(dtype="datetime64[ns]"),
                "date": pd.Series(dtype=object),
                "activity_type": pd.Series(dtype=object),
                "duration": pd.Series(dtype=float),
                "quantity": pd.Series(dtype=float),
                "notes": pd.Series(dtype=object),
                "imported_at": pd.Series(dtype="datetime64[ns]"),
                "imported_filename": pd.Series(dtype=object),
            },
            columns=FRAME_COLUMNS,
        )

    df = pd.DataFrame(
        {
            "id": [r.id for r in records],
            "timestamp": pd.to_datetime([r.timestamp for r in records]),
            "date": [r.timestamp.date() for r in records],
            "activity_type": [r.activity_type.value for r in records],
            "duration": pd.Series(
                [r.duration for r in records], dtype=float
            ),
            "quantity": pd.Series(
                [r.quantity for r in records], dtype=float
            ),
            "notes": [r.notes for r in records],
            "imported_at": pd.to_datetime(
                [r.metadata.imported_at for r in records]
            ),
            "imported_filename": [r.metadata.imported_filename for r in records],
        },
        columns=FRAME_COLUMNS,
    )
    return df

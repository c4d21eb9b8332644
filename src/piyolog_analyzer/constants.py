"""
Constants used throughout the Piyolog Analyzer package.

This module centralizes thresholds, export-format markers and other magic
numbers so parser and analytics share a single source of truth.
"""

from typing import Final


# === Time Constants ===
class TimeConstants:
    """Time-related constants."""

    SECONDS_PER_DAY: Final[int] = 86400
    HOURS_PER_DAY: Final[int] = 24


# === Time-of-day Buckets (hour boundaries, half-open) ===
class TimeOfDayBounds:
    """Hour ranges for the named time-of-day buckets."""

    MORNING_START: Final[int] = 6
    AFTERNOON_START: Final[int] = 12
    EVENING_START: Final[int] = 18
    NIGHT_START: Final[int] = 22  # night wraps around midnight until 06:00


# === Export Format Markers ===
class ExportMarkers:
    """Literal markers found in the Piyolog text export."""

    SEPARATOR: Final[str] = "----------"
    DEFAULT_FILENAME: Final[str] = "piyolog.txt"

    # Lines containing any of these are summaries or diary text
    SUMMARY_MARKERS: Final[tuple[str, ...]] = ("合計", "今日は", "メモ")


# === Trend Thresholds ===
class TrendThresholds:
    """Thresholds for trend detection."""

    MIN_DAYS_FOR_TREND: Final[int] = 7
    STABILITY_THRESHOLD: Final[float] = 0.01  # |slope| below this is stable

    HIGH_CONFIDENCE: Final[float] = 0.7
    HIGH_MAGNITUDE: Final[float] = 0.5
    MEDIUM_CONFIDENCE: Final[float] = 0.5
    MEDIUM_MAGNITUDE: Final[float] = 0.3


# === Correlation Thresholds ===
class CorrelationThresholds:
    """Thresholds for correlation analysis."""

    MIN_DAYS_FOR_CORRELATION: Final[int] = 7
    DIRECTION_THRESHOLD: Final[float] = 0.1

    # Lower bounds on |r| for each strength label
    WEAK: Final[float] = 0.2
    MODERATE: Final[float] = 0.4
    STRONG: Final[float] = 0.6
    VERY_STRONG: Final[float] = 0.8


# === Outlier Thresholds ===
class OutlierThresholds:
    """Thresholds for outlier detection."""

    MIN_SAMPLES: Final[int] = 5

    ZSCORE_THRESHOLD: Final[float] = 3.0
    ZSCORE_MODERATE: Final[float] = 3.5
    ZSCORE_EXTREME: Final[float] = 4.0

    IQR_MULTIPLIER: Final[float] = 1.5
    IQR_MODERATE: Final[float] = 2.0
    IQR_EXTREME: Final[float] = 3.0


# === Display Limits ===
class DisplayLimits:
    """Limits for user-facing output."""

    MAX_DISPLAYED_ERRORS: Final[int] = 10


# === Analysis Execution ===
class ExecutionDefaults:
    """Defaults for offloaded analysis runs."""

    TIMEOUT_SECONDS: Final[float] = 30.0
    MAX_WORKERS: Final[int] = 4


# === CSV Parsing ===
class CSVConstants:
    """Constants for the CSV export variant."""

    DEFAULT_ENCODING: Final[str] = "utf-8"
    EXPECTED_HEADERS: Final[tuple[str, ...]] = (
        "timestamp",
        "activity_type",
        "duration_minutes",
        "quantity_ml",
        "notes",
    )
    MAX_DURATION_MINUTES: Final[float] = 1440.0
    MAX_QUANTITY: Final[float] = 10000.0


# === File Extensions ===
class FileExtensions:
    """Common file extensions."""

    CSV: Final[str] = ".csv"

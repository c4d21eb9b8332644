"""
Data models for the Piyolog Analyzer package.

This module defines the activity record produced by the parsers and every
derived value object returned by the analytics, using Pydantic models for
type safety and validation. All models are frozen: records are immutable once
produced and analytics results are read-only snapshots.
"""

from datetime import date as CalendarDate
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ActivityType(str, Enum):
    """Closed set of supported activity types."""

    FEEDING = "feeding"
    SLEEPING = "sleeping"
    DIAPER = "diaper"
    TEMPERATURE = "temperature"
    WEIGHT = "weight"
    HEIGHT = "height"
    BATH = "bath"
    WALK = "walk"
    MEDICINE = "medicine"
    HOSPITAL = "hospital"


class Metric(str, Enum):
    """Quantity a trend or outlier analysis is computed on."""

    FREQUENCY = "frequency"
    DURATION = "duration"
    QUANTITY = "quantity"


class TrendDirection(str, Enum):
    """Direction of a fitted trend."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class TrendSignificance(str, Enum):
    """Significance tier of a fitted trend."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CorrelationStrength(str, Enum):
    """Strength label for an absolute correlation coefficient."""

    VERY_WEAK = "very weak"
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very strong"


class CorrelationDirection(str, Enum):
    """Sign of a correlation coefficient."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NONE = "none"


class OutlierMethod(str, Enum):
    """Detector that flagged an outlier."""

    ZSCORE = "z-score"
    IQR = "iqr"


class OutlierSeverity(str, Enum):
    """Severity of a flagged outlier."""

    MILD = "mild"
    MODERATE = "moderate"
    EXTREME = "extreme"


class TimeOfDay(str, Enum):
    """Named time-of-day buckets."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class InsightType(str, Enum):
    """Tone of a generated insight sentence."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    WARNING = "warning"
    INFO = "info"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Records ---


class RecordMetadata(_FrozenModel):
    """Import provenance attached to every record."""

    imported_at: datetime = Field(..., description="Time the import ran")
    imported_filename: str | None = Field(
        None, description="Source identifier of the imported file"
    )


class Record(_FrozenModel):
    """One activity event from a Piyolog export."""

    id: int | str | None = Field(
        None, description="Opaque identifier assigned by the caller"
    )
    timestamp: datetime = Field(..., description="Event time (naive local time)")
    activity_type: ActivityType = Field(..., description="Activity type")
    duration: float | None = Field(None, ge=0, description="Duration in minutes")
    quantity: float | None = Field(
        None,
        ge=0,
        description="Quantity: ml for milk, kg for weight, cm for height, °C for "
        "temperature",
    )
    notes: str | None = Field(None, description="Human-readable detail")
    metadata: RecordMetadata = Field(..., description="Import provenance")

    def metric_value(self, metric: Metric) -> float | None:
        """Return the duration or quantity field selected by ``metric``."""
        if metric == Metric.DURATION:
            return self.duration
        if metric == Metric.QUANTITY:
            return self.quantity
        raise ValueError(f"Records carry no per-record value for {metric.value}")


class ParseError(_FrozenModel):
    """A line-scoped problem found by the text parser."""

    line: int = Field(..., ge=1, description="1-based line number")
    message: str = Field(..., description="Human-readable reason")
    raw_text: str | None = Field(None, description="Original line content")


class CsvParseError(_FrozenModel):
    """A row/field-scoped problem found by the CSV parser."""

    row: int = Field(..., ge=0, description="1-based data row, 0 for the header")
    field: str | None = Field(None, description="Offending column")
    message: str = Field(..., description="Human-readable reason")
    raw_data: str | None = Field(None, description="Original cell content")


class TextParseResult(_FrozenModel):
    """Outcome of parsing a Piyolog text export."""

    records: list[Record] = Field(default_factory=list)
    errors: list[ParseError] = Field(default_factory=list)
    total_lines: int = Field(0, description="Number of lines in the input")
    parsed_event_count: int = Field(0, description="Number of records produced")


class CsvParseResult(_FrozenModel):
    """Outcome of parsing a Piyolog CSV export."""

    records: list[Record] = Field(default_factory=list)
    errors: list[CsvParseError] = Field(default_factory=list)
    total_rows: int = Field(0, description="Number of data rows read")
    success_rows: int = Field(0, description="Number of records produced")


# --- Statistics ---


class StatisticsSummary(_FrozenModel):
    """Descriptive statistics of a numeric sample."""

    count: int
    sum: float
    mean: float
    median: float
    min: float
    max: float
    std_dev: float = Field(..., description="Population standard deviation")
    q1: float = Field(..., description="25th percentile (linear interpolation)")
    q3: float = Field(..., description="75th percentile (linear interpolation)")


class Quartiles(_FrozenModel):
    """Quartiles and interquartile range of a numeric sample."""

    q1: float
    q2: float
    q3: float
    iqr: float


class TimeOfDayDistribution(_FrozenModel):
    """Record counts per named time-of-day bucket."""

    morning: int = 0
    afternoon: int = 0
    evening: int = 0
    night: int = 0


class TimeDistribution(_FrozenModel):
    """Hour-of-day histogram plus named buckets."""

    by_hour: dict[int, int] = Field(..., description="Counts for hours 0-23")
    by_time_of_day: TimeOfDayDistribution


class ActivityStatistics(_FrozenModel):
    """Statistics for a single activity type."""

    activity_type: ActivityType
    frequency: int
    duration: StatisticsSummary | None = None
    quantity: StatisticsSummary | None = None
    time_distribution: TimeDistribution


class DateRange(_FrozenModel):
    """Span covered by a record collection."""

    earliest: datetime | None = None
    latest: datetime | None = None
    duration_days: int = 0


class OverallStatistics(_FrozenModel):
    """Statistics across all activity types."""

    total_records: int
    date_range: DateRange
    activity_type_count: int
    records_per_day: float
    activity_breakdown: dict[ActivityType, int] = Field(default_factory=dict)


# --- Trends ---


class TimeSeriesPoint(_FrozenModel):
    """One calendar day of an aggregated series."""

    date: CalendarDate
    value: float


class LinearRegressionResult(_FrozenModel):
    """Least-squares fit of value against elapsed days."""

    slope: float = Field(..., description="Change per day")
    intercept: float
    r_squared: float = Field(..., description="Coefficient of determination")


class TrendAnalysis(_FrozenModel):
    """Trend classification for one activity metric."""

    activity_type: ActivityType
    metric: Metric
    direction: TrendDirection = TrendDirection.STABLE
    magnitude: float = Field(0.0, description="Rate of change per day")
    confidence: float = Field(0.0, description="R-squared of the fit, 0-1")
    significance: TrendSignificance = TrendSignificance.LOW
    data_points: int = 0
    has_enough_data: bool = False


# --- Correlations & Outliers ---


class CorrelationResult(_FrozenModel):
    """Pearson correlation between two activities' daily frequencies."""

    activity_type_1: ActivityType
    activity_type_2: ActivityType
    coefficient: float = Field(..., ge=-1.0, le=1.0)
    strength: CorrelationStrength
    direction: CorrelationDirection
    sample_size: int = Field(..., description="Number of aligned days")


class OutlierResult(_FrozenModel):
    """A record flagged as a statistical outlier."""

    record: Record
    metric: Metric
    value: float
    method: OutlierMethod
    score: float = Field(..., description="Signed z-score or IQR multiples")
    severity: OutlierSeverity


class Insight(_FrozenModel):
    """A localized sentence describing an analytics result."""

    message: str
    type: InsightType


class AnalyticsReport(_FrozenModel):
    """Bundle of every analysis computed over one record collection."""

    overall: OverallStatistics
    statistics: list[ActivityStatistics] = Field(default_factory=list)
    trends: dict[ActivityType, list[TrendAnalysis]] = Field(default_factory=dict)
    correlations: list[CorrelationResult] = Field(default_factory=list)
    outliers: dict[ActivityType, list[OutlierResult]] = Field(default_factory=dict)

"""
Descriptive statistics over activity records.

All functions are pure: they never mutate the input records and return None
or zeroed results for empty input instead of raising.
"""

import logging
import math
from collections import Counter
from datetime import date, datetime, time

import numpy as np

from ..constants import TimeConstants, TimeOfDayBounds
from ..exceptions import ValidationError
from ..models import (
    ActivityStatistics,
    ActivityType,
    DateRange,
    Metric,
    OverallStatistics,
    Quartiles,
    Record,
    StatisticsSummary,
    TimeDistribution,
    TimeOfDay,
    TimeOfDayDistribution,
)

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59, 999000)


def calculate_percentile(values: list[float], percentile: float) -> float:
    """
    Percentile by linear interpolation between closest ranks (R-7).

    Args:
        values: Sample values (any order)
        percentile: Percentile in [0, 100]

    Returns:
        Interpolated percentile, or 0.0 for an empty sample

    Raises:
        ValidationError: If percentile is outside [0, 100]
    """
    if percentile < 0 or percentile > 100:
        raise ValidationError(f"Percentile must be between 0 and 100, got {percentile}")
    if len(values) == 0:
        return 0.0
    return float(np.percentile(np.asarray(values, dtype=float), percentile))


def calculate_quartiles(values: list[float]) -> Quartiles | None:
    """Quartiles (R-7) and IQR, or None for an empty sample."""
    if len(values) == 0:
        return None

    q1 = calculate_percentile(values, 25)
    q2 = calculate_percentile(values, 50)
    q3 = calculate_percentile(values, 75)
    return Quartiles(q1=q1, q2=q2, q3=q3, iqr=q3 - q1)


def summarize(values: list[float]) -> StatisticsSummary | None:
    """
    Compute count, sum, mean, median, min, max, population std dev and quartiles.

    Args:
        values: Sample values

    Returns:
        StatisticsSummary, or None for an empty sample
    """
    if len(values) == 0:
        return None

    arr = np.asarray(values, dtype=float)
    return StatisticsSummary(
        count=len(arr),
        sum=float(arr.sum()),
        mean=float(arr.mean()),
        median=float(np.median(arr)),
        min=float(arr.min()),
        max=float(arr.max()),
        std_dev=float(arr.std()),  # ddof=0: population standard deviation
        q1=calculate_percentile(values, 25),
        q3=calculate_percentile(values, 75),
    )


def time_of_day(hour: int) -> TimeOfDay:
    """Map an hour (0-23) to its named bucket; night wraps past midnight."""
    if TimeOfDayBounds.MORNING_START <= hour < TimeOfDayBounds.AFTERNOON_START:
        return TimeOfDay.MORNING
    if TimeOfDayBounds.AFTERNOON_START <= hour < TimeOfDayBounds.EVENING_START:
        return TimeOfDay.AFTERNOON
    if TimeOfDayBounds.EVENING_START <= hour < TimeOfDayBounds.NIGHT_START:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def time_distribution(records: list[Record]) -> TimeDistribution:
    """Histogram records by hour of day and by named time-of-day bucket."""
    by_hour = {hour: 0 for hour in range(TimeConstants.HOURS_PER_DAY)}
    buckets: Counter[TimeOfDay] = Counter()

    for record in records:
        hour = record.timestamp.hour
        by_hour[hour] += 1
        buckets[time_of_day(hour)] += 1

    return TimeDistribution(
        by_hour=by_hour,
        by_time_of_day=TimeOfDayDistribution(
            **{bucket.value: count for bucket, count in buckets.items()}
        ),
    )


def metric_values(
    records: list[Record], activity_type: ActivityType, metric: Metric
) -> list[float]:
    """Values of ``metric`` for records of one type, skipping absent values."""
    values = []
    for record in records:
        if record.activity_type != activity_type:
            continue
        value = record.metric_value(metric)
        if value is not None:
            values.append(value)
    return values


def per_activity_statistics(
    records: list[Record], activity_type: ActivityType
) -> ActivityStatistics:
    """
    Frequency, duration/quantity summaries and time distribution for one type.

    Args:
        records: Record collection
        activity_type: Activity type to describe

    Returns:
        ActivityStatistics (summaries are None when no record has the field)
    """
    filtered = [r for r in records if r.activity_type == activity_type]
    return ActivityStatistics(
        activity_type=activity_type,
        frequency=len(filtered),
        duration=summarize(metric_values(filtered, activity_type, Metric.DURATION)),
        quantity=summarize(metric_values(filtered, activity_type, Metric.QUANTITY)),
        time_distribution=time_distribution(filtered),
    )


def overall_statistics(records: list[Record]) -> OverallStatistics:
    """
    Totals, covered date range and per-type breakdown across all records.

    ``duration_days`` is at least 1 for non-empty input so that
    ``records_per_day`` is always defined.
    """
    if not records:
        return OverallStatistics(
            total_records=0,
            date_range=DateRange(),
            activity_type_count=0,
            records_per_day=0.0,
        )

    timestamps = [r.timestamp for r in records]
    earliest, latest = min(timestamps), max(timestamps)
    elapsed_days = (latest - earliest).total_seconds() / TimeConstants.SECONDS_PER_DAY
    duration_days = max(1, math.ceil(elapsed_days))

    breakdown = Counter(r.activity_type for r in records)
    return OverallStatistics(
        total_records=len(records),
        date_range=DateRange(
            earliest=earliest, latest=latest, duration_days=duration_days
        ),
        activity_type_count=len(breakdown),
        records_per_day=len(records) / duration_days,
        activity_breakdown=dict(breakdown),
    )


def _as_datetime(value: date | datetime | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        # Record timestamps are naive wall-clock times
        return value.replace(tzinfo=None)
    return datetime.combine(value, time.min)


def filter_by_date_range(
    records: list[Record],
    start: date | datetime | str | None = None,
    end: date | datetime | str | None = None,
) -> list[Record]:
    """
    Keep records whose timestamp lies in [start, end], both inclusive.

    The end bound is moved to 23:59:59.999 of its calendar day so an end date
    of "today" includes all of today's records.

    Args:
        records: Record collection
        start: Earliest date/time to keep (ISO string accepted)
        end: Last calendar day to keep (ISO string accepted)

    Returns:
        Filtered list, in input order
    """
    start_dt = _as_datetime(start) if start is not None else None
    end_dt = (
        datetime.combine(_as_datetime(end).date(), END_OF_DAY)
        if end is not None
        else None
    )

    return [
        r
        for r in records
        if (start_dt is None or r.timestamp >= start_dt)
        and (end_dt is None or r.timestamp <= end_dt)
    ]


def unique_activity_types(records: list[Record]) -> list[ActivityType]:
    """Distinct activity types, most frequent first (ties in first-seen order)."""
    return [
        activity_type
        for activity_type, _ in Counter(r.activity_type for r in records).most_common()
    ]


def all_activity_statistics(
    records: list[Record],
    start: date | datetime | str | None = None,
    end: date | datetime | str | None = None,
) -> list[ActivityStatistics]:
    """Per-activity statistics for every type present in the date range."""
    filtered = filter_by_date_range(records, start, end)
    return [
        per_activity_statistics(filtered, activity_type)
        for activity_type in unique_activity_types(filtered)
    ]

"""
Cross-activity correlation and outlier detection.

Correlation compares two activities' daily frequencies with Pearson's r over
the days on which either activity occurs. Outliers are flagged per
(activity, metric) sample with a z-score detector and an IQR detector, which
can be combined.
"""

import logging
import math
from itertools import combinations
from typing import Literal

import numpy as np

from ..constants import CorrelationThresholds, OutlierThresholds
from ..data.storage import records_to_frame
from ..models import (
    ActivityType,
    CorrelationDirection,
    CorrelationResult,
    CorrelationStrength,
    Metric,
    OutlierMethod,
    OutlierResult,
    OutlierSeverity,
    Record,
)
from .statistics import calculate_percentile

logger = logging.getLogger(__name__)

QuartileMethod = Literal["floor", "linear"]


# --- Correlation ---


def pearson_correlation(x: list[float], y: list[float]) -> float | None:
    """
    Pearson correlation coefficient of two equally long samples.

    Args:
        x: First sample
        y: Second sample

    Returns:
        r in [-1, 1], or None if lengths differ, fewer than 2 values, or
        either sample has zero variance
    """
    if len(x) != len(y) or len(x) < 2:
        return None

    xa = np.asarray(x, dtype=float)
    ya = np.asarray(y, dtype=float)
    if np.all(xa == xa[0]) or np.all(ya == ya[0]):
        return None

    dx = xa - xa.mean()
    dy = ya - ya.mean()
    denominator = math.sqrt(float((dx * dx).sum() * (dy * dy).sum()))
    if denominator == 0:
        return None

    r = float((dx * dy).sum()) / denominator
    return max(-1.0, min(1.0, r))


def interpret_strength(coefficient: float) -> CorrelationStrength:
    """Strength label for |r|."""
    magnitude = abs(coefficient)
    if magnitude >= CorrelationThresholds.VERY_STRONG:
        return CorrelationStrength.VERY_STRONG
    if magnitude >= CorrelationThresholds.STRONG:
        return CorrelationStrength.STRONG
    if magnitude >= CorrelationThresholds.MODERATE:
        return CorrelationStrength.MODERATE
    if magnitude >= CorrelationThresholds.WEAK:
        return CorrelationStrength.WEAK
    return CorrelationStrength.VERY_WEAK


def correlation_direction(
    coefficient: float, threshold: float = CorrelationThresholds.DIRECTION_THRESHOLD
) -> CorrelationDirection:
    """Sign of r, or none when |r| is below ``threshold``."""
    if abs(coefficient) < threshold:
        return CorrelationDirection.NONE
    if coefficient > 0:
        return CorrelationDirection.POSITIVE
    return CorrelationDirection.NEGATIVE


def aligned_daily_frequencies(
    records: list[Record], type_a: ActivityType, type_b: ActivityType
) -> tuple[list[float], list[float]]:
    """
    Daily counts of two activities over the union of their active days.

    Days on which only one of the two occurs contribute a zero for the other.

    Returns:
        Two equally long lists ordered by date
    """
    df = records_to_frame(records)
    df = df[df["activity_type"].isin([type_a.value, type_b.value])]
    if df.empty:
        return [], []

    days = sorted(df["date"].unique())
    counts = []
    for activity_type in (type_a, type_b):
        daily = (
            df[df["activity_type"] == activity_type.value]
            .groupby("date")
            .size()
            .reindex(days, fill_value=0)
        )
        counts.append([float(v) for v in daily])
    return counts[0], counts[1]


def activity_correlation(
    records: list[Record],
    type_a: ActivityType,
    type_b: ActivityType,
    min_days: int = CorrelationThresholds.MIN_DAYS_FOR_CORRELATION,
    direction_threshold: float = CorrelationThresholds.DIRECTION_THRESHOLD,
) -> CorrelationResult | None:
    """
    Correlate two activities' daily frequencies.

    Args:
        records: Record collection
        type_a: First activity type
        type_b: Second activity type
        min_days: Minimum number of aligned days
        direction_threshold: |r| below which the direction is none

    Returns:
        CorrelationResult, or None with fewer than ``min_days`` aligned days or
        an undefined coefficient
    """
    freq_a, freq_b = aligned_daily_frequencies(records, type_a, type_b)
    if len(freq_a) < min_days:
        return None

    coefficient = pearson_correlation(freq_a, freq_b)
    if coefficient is None:
        return None

    return CorrelationResult(
        activity_type_1=type_a,
        activity_type_2=type_b,
        coefficient=coefficient,
        strength=interpret_strength(coefficient),
        direction=correlation_direction(coefficient, direction_threshold),
        sample_size=len(freq_a),
    )


def all_pairwise_correlations(
    records: list[Record],
    activity_types: list[ActivityType],
    min_days: int = CorrelationThresholds.MIN_DAYS_FOR_CORRELATION,
    direction_threshold: float = CorrelationThresholds.DIRECTION_THRESHOLD,
) -> list[CorrelationResult]:
    """Correlations for every unordered pair, strongest |r| first."""
    results = []
    for type_a, type_b in combinations(activity_types, 2):
        result = activity_correlation(
            records, type_a, type_b, min_days, direction_threshold
        )
        if result is not None:
            results.append(result)
    return sorted(results, key=lambda c: abs(c.coefficient), reverse=True)


def get_significant_correlations(
    correlations: list[CorrelationResult],
) -> list[CorrelationResult]:
    """Correlations of moderate strength or stronger."""
    return [
        c
        for c in correlations
        if c.strength
        in (
            CorrelationStrength.MODERATE,
            CorrelationStrength.STRONG,
            CorrelationStrength.VERY_STRONG,
        )
    ]


# --- Outliers ---


def _metric_samples(
    records: list[Record], activity_type: ActivityType, metric: Metric
) -> list[tuple[Record, float]]:
    samples = []
    for record in records:
        if record.activity_type != activity_type:
            continue
        value = record.metric_value(metric)
        if value is not None:
            samples.append((record, value))
    return samples


def z_score(value: float, mean: float, std_dev: float) -> float:
    """Standard score, 0 when the spread is zero."""
    if std_dev == 0:
        return 0.0
    return (value - mean) / std_dev


def _zscore_severity(abs_score: float) -> OutlierSeverity:
    if abs_score > OutlierThresholds.ZSCORE_EXTREME:
        return OutlierSeverity.EXTREME
    if abs_score > OutlierThresholds.ZSCORE_MODERATE:
        return OutlierSeverity.MODERATE
    return OutlierSeverity.MILD


def zscore_outliers(
    records: list[Record],
    activity_type: ActivityType,
    metric: Metric,
    threshold: float = OutlierThresholds.ZSCORE_THRESHOLD,
    min_samples: int = OutlierThresholds.MIN_SAMPLES,
) -> list[OutlierResult]:
    """
    Flag values whose population z-score exceeds ``threshold`` in magnitude.

    Args:
        records: Record collection
        activity_type: Activity type to inspect
        metric: ``Metric.DURATION`` or ``Metric.QUANTITY``
        threshold: |z| above which a value is an outlier
        min_samples: Minimum number of values required

    Returns:
        Outliers sorted by descending |z|; empty for small or constant samples
    """
    samples = _metric_samples(records, activity_type, metric)
    if len(samples) < min_samples:
        return []

    values = np.array([value for _, value in samples], dtype=float)
    mean = float(values.mean())
    std_dev = float(values.std())
    if std_dev == 0:
        return []

    outliers = []
    for record, value in samples:
        score = z_score(value, mean, std_dev)
        if abs(score) > threshold:
            outliers.append(
                OutlierResult(
                    record=record,
                    metric=metric,
                    value=value,
                    method=OutlierMethod.ZSCORE,
                    score=score,
                    severity=_zscore_severity(abs(score)),
                )
            )
    return sorted(outliers, key=lambda o: abs(o.score), reverse=True)


def _floor_quartiles(values: list[float]) -> tuple[float, float]:
    ordered = sorted(values)
    n = len(ordered)
    return ordered[math.floor(n * 0.25)], ordered[math.floor(n * 0.75)]


def _iqr_severity(score: float) -> OutlierSeverity:
    if score > OutlierThresholds.IQR_EXTREME:
        return OutlierSeverity.EXTREME
    if score > OutlierThresholds.IQR_MODERATE:
        return OutlierSeverity.MODERATE
    return OutlierSeverity.MILD


def iqr_outliers(
    records: list[Record],
    activity_type: ActivityType,
    metric: Metric,
    multiplier: float = OutlierThresholds.IQR_MULTIPLIER,
    min_samples: int = OutlierThresholds.MIN_SAMPLES,
    quartile_method: QuartileMethod = "floor",
) -> list[OutlierResult]:
    """
    Flag values outside [Q1 - m·IQR, Q3 + m·IQR].

    The score is how many IQRs the value lies beyond the violated bound; with
    a zero IQR any value outside the bounds scores infinity.

    Args:
        records: Record collection
        activity_type: Activity type to inspect
        metric: ``Metric.DURATION`` or ``Metric.QUANTITY``
        multiplier: Fence multiplier m
        min_samples: Minimum number of values required
        quartile_method: "floor" picks sorted[floor(n·p)]; "linear" uses the
            interpolated percentile of the statistics module

    Returns:
        Outliers sorted by descending score
    """
    samples = _metric_samples(records, activity_type, metric)
    if len(samples) < min_samples:
        return []

    values = [value for _, value in samples]
    if quartile_method == "linear":
        q1, q3 = calculate_percentile(values, 25), calculate_percentile(values, 75)
    else:
        q1, q3 = _floor_quartiles(values)
    iqr = q3 - q1
    lower_bound = q1 - multiplier * iqr
    upper_bound = q3 + multiplier * iqr

    outliers = []
    for record, value in samples:
        if lower_bound <= value <= upper_bound:
            continue
        distance = lower_bound - value if value < lower_bound else value - upper_bound
        score = distance / iqr if iqr > 0 else math.inf
        outliers.append(
            OutlierResult(
                record=record,
                metric=metric,
                value=value,
                method=OutlierMethod.IQR,
                score=score,
                severity=_iqr_severity(score),
            )
        )
    return sorted(outliers, key=lambda o: o.score, reverse=True)


def _identity(record: Record) -> object:
    return ("id", record.id) if record.id is not None else ("obj", id(record))


def all_outliers(
    records: list[Record],
    activity_type: ActivityType,
    metric: Metric,
    zscore_threshold: float = OutlierThresholds.ZSCORE_THRESHOLD,
    iqr_multiplier: float = OutlierThresholds.IQR_MULTIPLIER,
    min_samples: int = OutlierThresholds.MIN_SAMPLES,
    quartile_method: QuartileMethod = "floor",
) -> list[OutlierResult]:
    """
    Union of z-score and IQR outliers, one entry per record.

    A record flagged by both detectors keeps its z-score classification.
    Records are identified by id, or by object identity when they have none.

    Returns:
        Outliers sorted by descending |score|
    """
    combined: dict[object, OutlierResult] = {}
    detected = zscore_outliers(
        records, activity_type, metric, zscore_threshold, min_samples
    ) + iqr_outliers(
        records, activity_type, metric, iqr_multiplier, min_samples, quartile_method
    )
    for outlier in detected:
        combined.setdefault(_identity(outlier.record), outlier)

    return sorted(combined.values(), key=lambda o: abs(o.score), reverse=True)

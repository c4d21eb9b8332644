"""
Trend detection over daily time series.

Records are grouped by naive calendar date, aggregated into one point per day
that has data (days without data are absent, not zero), and fitted with an
ordinary least-squares line against elapsed days. The slope is classified as
increasing/decreasing/stable and the fit quality as low/medium/high.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Literal

import numpy as np
import pandas as pd
from scipy.stats import linregress

from ..constants import TrendThresholds
from ..data.storage import records_to_frame
from ..models import (
    ActivityType,
    LinearRegressionResult,
    Metric,
    Record,
    TimeSeriesPoint,
    TrendAnalysis,
    TrendDirection,
    TrendSignificance,
)

logger = logging.getLogger(__name__)


def group_by_calendar_date(records: list[Record]) -> dict[date, list[Record]]:
    """
    Group records by the calendar date of their timestamp.

    No timezone conversion is applied: the date is the one the naive
    timestamp carries.

    Args:
        records: Record collection

    Returns:
        Mapping of date to that day's records, in first-seen order
    """
    grouped: dict[date, list[Record]] = defaultdict(list)
    for record in records:
        grouped[record.timestamp.date()].append(record)
    return dict(grouped)


def _frame_for(records: list[Record], activity_type: ActivityType) -> pd.DataFrame:
    df = records_to_frame(records)
    return df[df["activity_type"] == activity_type.value]


def _to_points(series: pd.Series) -> list[TimeSeriesPoint]:
    return [
        TimeSeriesPoint(date=day, value=float(value))
        for day, value in series.sort_index().items()
    ]


def daily_frequency(
    records: list[Record], activity_type: ActivityType
) -> list[TimeSeriesPoint]:
    """
    Count of matching records per day, ascending by date.

    Args:
        records: Record collection
        activity_type: Activity type to count

    Returns:
        One point per day with at least one matching record
    """
    df = _frame_for(records, activity_type)
    if df.empty:
        return []
    return _to_points(df.groupby("date").size())


def daily_aggregate(
    records: list[Record],
    activity_type: ActivityType,
    metric: Metric,
    aggregation: Literal["sum", "average"] = "sum",
) -> list[TimeSeriesPoint]:
    """
    Daily sum or mean of duration/quantity, ascending by date.

    Only records that carry the metric contribute; days where none do are
    omitted.

    Args:
        records: Record collection
        activity_type: Activity type to aggregate
        metric: ``Metric.DURATION`` or ``Metric.QUANTITY``
        aggregation: "sum" or "average"

    Returns:
        One point per day with at least one value
    """
    if metric == Metric.FREQUENCY:
        raise ValueError("Use daily_frequency for frequency series")

    df = _frame_for(records, activity_type)
    values = df.dropna(subset=[metric.value])
    if values.empty:
        return []

    func = "mean" if aggregation == "average" else "sum"
    return _to_points(values.groupby("date")[metric.value].agg(func))


def moving_average(
    points: list[TimeSeriesPoint], window_size: int
) -> list[TimeSeriesPoint]:
    """Trailing mean over ``window_size`` consecutive points."""
    if window_size < 1 or len(points) < window_size:
        return []

    values = pd.Series([p.value for p in points])
    averaged = values.rolling(window_size).mean()
    return [
        TimeSeriesPoint(date=points[i].date, value=float(averaged.iloc[i]))
        for i in range(window_size - 1, len(points))
    ]


def _elapsed_days(points: list[TimeSeriesPoint]) -> np.ndarray:
    first = points[0].date
    return np.array([(p.date - first).days for p in points], dtype=float)


def linear_regression(points: list[TimeSeriesPoint]) -> LinearRegressionResult | None:
    """
    Least-squares fit of value against days elapsed since the first point.

    Gaps between points keep their real width on the x axis.

    Args:
        points: Series sorted ascending by date

    Returns:
        Slope, intercept and R², or None for fewer than 2 points, constant
        values, identical dates, or a non-finite slope
    """
    if len(points) < 2:
        return None

    x = _elapsed_days(points)
    y = np.array([p.value for p in points], dtype=float)

    # Zero variance in y makes R² undefined; zero variance in x has no slope
    if np.all(y == y[0]) or np.all(x == x[0]):
        return None

    fit = linregress(x, y)
    if not np.isfinite(fit.slope):
        return None

    return LinearRegressionResult(
        slope=float(fit.slope),
        intercept=float(fit.intercept),
        r_squared=float(fit.rvalue**2),
    )


def has_enough_data_for_trend(
    points: list[TimeSeriesPoint],
    min_days: int = TrendThresholds.MIN_DAYS_FOR_TREND,
) -> bool:
    """At least ``min_days`` points spanning at least ``min_days - 1`` days."""
    if len(points) < min_days:
        return False
    return (points[-1].date - points[0].date).days >= min_days - 1


def classify_direction(
    slope: float, threshold: float = TrendThresholds.STABILITY_THRESHOLD
) -> TrendDirection:
    """Slopes with magnitude below ``threshold`` are stable."""
    if abs(slope) < threshold:
        return TrendDirection.STABLE
    return TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING


def classify_significance(magnitude: float, confidence: float) -> TrendSignificance:
    """
    High needs a clean fit AND a large slope; medium needs either.

    Args:
        magnitude: Slope (change per day)
        confidence: R² of the fit

    Returns:
        Significance tier
    """
    if (
        confidence >= TrendThresholds.HIGH_CONFIDENCE
        and abs(magnitude) >= TrendThresholds.HIGH_MAGNITUDE
    ):
        return TrendSignificance.HIGH
    if (
        confidence >= TrendThresholds.MEDIUM_CONFIDENCE
        or abs(magnitude) >= TrendThresholds.MEDIUM_MAGNITUDE
    ):
        return TrendSignificance.MEDIUM
    return TrendSignificance.LOW


def _analyze_series(
    points: list[TimeSeriesPoint],
    activity_type: ActivityType,
    metric: Metric,
    threshold: float,
    min_days: int,
) -> TrendAnalysis:
    if not has_enough_data_for_trend(points, min_days):
        return TrendAnalysis(
            activity_type=activity_type,
            metric=metric,
            data_points=len(points),
            has_enough_data=False,
        )

    regression = linear_regression(points)
    if regression is None:
        return TrendAnalysis(
            activity_type=activity_type,
            metric=metric,
            data_points=len(points),
            has_enough_data=True,
        )

    return TrendAnalysis(
        activity_type=activity_type,
        metric=metric,
        direction=classify_direction(regression.slope, threshold),
        magnitude=regression.slope,
        confidence=regression.r_squared,
        significance=classify_significance(regression.slope, regression.r_squared),
        data_points=len(points),
        has_enough_data=True,
    )


def analyze_frequency_trend(
    records: list[Record],
    activity_type: ActivityType,
    threshold: float = TrendThresholds.STABILITY_THRESHOLD,
    min_days: int = TrendThresholds.MIN_DAYS_FOR_TREND,
) -> TrendAnalysis:
    """
    Trend of the daily count of one activity.

    Always returns a renderable result: with too little data it is stable,
    zero-magnitude, low-significance and ``has_enough_data=False``.
    """
    points = daily_frequency(records, activity_type)
    return _analyze_series(points, activity_type, Metric.FREQUENCY, threshold, min_days)


def analyze_metric_trend(
    records: list[Record],
    activity_type: ActivityType,
    metric: Metric,
    threshold: float = TrendThresholds.STABILITY_THRESHOLD,
    min_days: int = TrendThresholds.MIN_DAYS_FOR_TREND,
) -> TrendAnalysis:
    """Trend of the daily average duration or quantity of one activity."""
    points = daily_aggregate(records, activity_type, metric, "average")
    return _analyze_series(points, activity_type, metric, threshold, min_days)


def analyze_all_trends(
    records: list[Record],
    activity_type: ActivityType,
    threshold: float = TrendThresholds.STABILITY_THRESHOLD,
    min_days: int = TrendThresholds.MIN_DAYS_FOR_TREND,
) -> list[TrendAnalysis]:
    """
    Frequency trend plus duration/quantity trends where the data has them.

    Args:
        records: Record collection
        activity_type: Activity type to analyze
        threshold: Stability threshold on the slope
        min_days: Minimum days of coverage for a trend

    Returns:
        Frequency trend first, then duration and quantity if present
    """
    trends = [analyze_frequency_trend(records, activity_type, threshold, min_days)]

    matching = [r for r in records if r.activity_type == activity_type]
    if any(r.duration is not None for r in matching):
        trends.append(
            analyze_metric_trend(
                records, activity_type, Metric.DURATION, threshold, min_days
            )
        )
    if any(r.quantity is not None for r in matching):
        trends.append(
            analyze_metric_trend(
                records, activity_type, Metric.QUANTITY, threshold, min_days
            )
        )
    return trends


def get_significant_trends(trends: list[TrendAnalysis]) -> list[TrendAnalysis]:
    """Medium/high significance trends, most confident first."""
    significant = [
        t
        for t in trends
        if t.significance in (TrendSignificance.MEDIUM, TrendSignificance.HIGH)
    ]
    return sorted(significant, key=lambda t: t.confidence, reverse=True)

"""
Analysis and computation layer.

This package contains pure functions computing statistics, trends,
correlations, outliers and insight sentences over parsed records.
"""

from .correlations import (
    activity_correlation,
    all_outliers,
    all_pairwise_correlations,
    get_significant_correlations,
    iqr_outliers,
    pearson_correlation,
    zscore_outliers,
)
from .insights import correlation_insight, outlier_insight
from .statistics import (
    all_activity_statistics,
    calculate_percentile,
    calculate_quartiles,
    filter_by_date_range,
    overall_statistics,
    per_activity_statistics,
    summarize,
    unique_activity_types,
)
from .trends import (
    analyze_all_trends,
    analyze_frequency_trend,
    analyze_metric_trend,
    classify_direction,
    classify_significance,
    daily_aggregate,
    daily_frequency,
    get_significant_trends,
    group_by_calendar_date,
    has_enough_data_for_trend,
    linear_regression,
    moving_average,
)

__all__ = [
    # Statistics
    "all_activity_statistics",
    "calculate_percentile",
    "calculate_quartiles",
    "filter_by_date_range",
    "overall_statistics",
    "per_activity_statistics",
    "summarize",
    "unique_activity_types",
    # Trends
    "analyze_all_trends",
    "analyze_frequency_trend",
    "analyze_metric_trend",
    "classify_direction",
    "classify_significance",
    "daily_aggregate",
    "daily_frequency",
    "get_significant_trends",
    "group_by_calendar_date",
    "has_enough_data_for_trend",
    "linear_regression",
    "moving_average",
    # Correlations & Outliers
    "activity_correlation",
    "all_outliers",
    "all_pairwise_correlations",
    "get_significant_correlations",
    "iqr_outliers",
    "pearson_correlation",
    "zscore_outliers",
    # Insights
    "correlation_insight",
    "outlier_insight",
]

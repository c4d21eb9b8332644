"""
High-level service for running the analytics over a record collection.

The analytics are pure and share no state, so the service may fan out per
activity type over a thread pool and may run a whole report on a worker
thread with a timeout. Cancellation is best effort: on timeout the caller
stops waiting and the late result is discarded.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import date, datetime
from typing import Protocol

from ..analysis import (
    all_activity_statistics,
    all_outliers,
    all_pairwise_correlations,
    analyze_all_trends,
    overall_statistics,
    unique_activity_types,
)
from ..exceptions import AnalysisTimeoutError, ProcessingError
from ..models import (
    ActivityStatistics,
    ActivityType,
    AnalyticsReport,
    CorrelationResult,
    Metric,
    OutlierResult,
    Record,
    TrendAnalysis,
)
from ..settings import Settings

logger = logging.getLogger(__name__)


class AnalysisServiceProtocol(Protocol):
    """Protocol for analysis services."""

    def run_all(
        self, records: list[Record], activity_types: list[ActivityType] | None = None
    ) -> AnalyticsReport:
        """Run every analysis over the records."""
        ...


class AnalysisService:
    """
    Coordinates the statistics, trend, correlation and outlier analyses.

    Thresholds come from settings so every caller sees the same configured
    behavior.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the analysis service.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)

    def _resolve_types(
        self, records: list[Record], activity_types: list[ActivityType] | None
    ) -> list[ActivityType]:
        if activity_types is None:
            return unique_activity_types(records)
        return list(activity_types)

    def statistics(
        self,
        records: list[Record],
        start: date | datetime | str | None = None,
        end: date | datetime | str | None = None,
    ) -> list[ActivityStatistics]:
        """Per-activity statistics within an optional date range."""
        return all_activity_statistics(records, start, end)

    def trends(
        self, records: list[Record], activity_types: list[ActivityType] | None = None
    ) -> dict[ActivityType, list[TrendAnalysis]]:
        """All trends per activity type, computed in parallel per type."""
        types = self._resolve_types(records, activity_types)

        def analyze(activity_type: ActivityType) -> list[TrendAnalysis]:
            return analyze_all_trends(
                records,
                activity_type,
                threshold=self.settings.trend_stability_threshold,
                min_days=self.settings.min_days_for_trend,
            )

        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            results = list(executor.map(analyze, types))
        return dict(zip(types, results))

    def correlations(
        self, records: list[Record], activity_types: list[ActivityType] | None = None
    ) -> list[CorrelationResult]:
        """Pairwise correlations, strongest first."""
        return all_pairwise_correlations(
            records,
            self._resolve_types(records, activity_types),
            min_days=self.settings.min_days_for_correlation,
            direction_threshold=self.settings.correlation_direction_threshold,
        )

    def outliers(
        self, records: list[Record], activity_type: ActivityType, metric: Metric
    ) -> list[OutlierResult]:
        """Combined z-score/IQR outliers for one activity metric."""
        return all_outliers(
            records,
            activity_type,
            metric,
            zscore_threshold=self.settings.zscore_threshold,
            iqr_multiplier=self.settings.iqr_multiplier,
            min_samples=self.settings.min_outlier_samples,
            quartile_method=self.settings.iqr_quartile_method,
        )

    def all_outliers(
        self, records: list[Record], activity_types: list[ActivityType] | None = None
    ) -> dict[ActivityType, list[OutlierResult]]:
        """Outliers on duration and quantity for every activity type."""
        result: dict[ActivityType, list[OutlierResult]] = {}
        for activity_type in self._resolve_types(records, activity_types):
            found = self.outliers(records, activity_type, Metric.DURATION)
            found += self.outliers(records, activity_type, Metric.QUANTITY)
            if found:
                result[activity_type] = sorted(
                    found, key=lambda o: abs(o.score), reverse=True
                )
        return result

    def run_all(
        self, records: list[Record], activity_types: list[ActivityType] | None = None
    ) -> AnalyticsReport:
        """
        Run every analysis over the records.

        Args:
            records: Record collection
            activity_types: Types to analyze (defaults to all present, most
                frequent first)

        Returns:
            AnalyticsReport bundling all results

        Raises:
            ProcessingError: If an analysis fails unexpectedly
        """
        try:
            types = self._resolve_types(records, activity_types)
            self.logger.info(
                f"Analyzing {len(records)} records across {len(types)} activity types"
            )
            return AnalyticsReport(
                overall=overall_statistics(records),
                statistics=self.statistics(records),
                trends=self.trends(records, types),
                correlations=self.correlations(records, types),
                outliers=self.all_outliers(records, types),
            )
        except Exception as e:
            self.logger.error(f"Analysis failed: {e}")
            raise ProcessingError(f"Analysis failed: {e}") from e

    def run_with_timeout(
        self,
        records: list[Record],
        activity_types: list[ActivityType] | None = None,
        timeout: float | None = None,
    ) -> AnalyticsReport:
        """
        Run ``run_all`` on a worker thread and wait at most ``timeout`` seconds.

        Args:
            records: Record collection, passed by value to the worker
            activity_types: Types to analyze
            timeout: Seconds to wait (defaults to the configured timeout)

        Returns:
            AnalyticsReport

        Raises:
            AnalysisTimeoutError: If the report is not ready in time
            ProcessingError: If the analysis fails
        """
        timeout = timeout if timeout is not None else self.settings.analysis_timeout_seconds
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self.run_all, list(records), activity_types)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as e:
            future.cancel()
            self.logger.warning(f"Analysis timed out after {timeout}s")
            raise AnalysisTimeoutError(
                f"Analytics computation timed out after {timeout}s"
            ) from e
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

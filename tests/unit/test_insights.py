"""Unit tests for insight sentences."""

from datetime import datetime

import pytest

from piyolog_analyzer.analysis.insights import correlation_insight, outlier_insight
from piyolog_analyzer.models import (
    ActivityType,
    CorrelationDirection,
    CorrelationResult,
    CorrelationStrength,
    InsightType,
    Metric,
    OutlierMethod,
    OutlierResult,
    OutlierSeverity,
)


def _correlation(coefficient, strength, direction) -> CorrelationResult:
    return CorrelationResult(
        activity_type_1=ActivityType.FEEDING,
        activity_type_2=ActivityType.DIAPER,
        coefficient=coefficient,
        strength=strength,
        direction=direction,
        sample_size=7,
    )


class TestCorrelationInsight:
    """Test correlation sentences."""

    def test_positive(self):
        """Test a positive correlation sentence."""
        insight = correlation_insight(
            _correlation(
                0.853, CorrelationStrength.VERY_STRONG, CorrelationDirection.POSITIVE
            )
        )

        assert insight.type == InsightType.POSITIVE
        assert "非常に強い正の相関" in insight.message
        assert "（0.85）" in insight.message

    def test_negative(self):
        """Test a negative correlation sentence."""
        insight = correlation_insight(
            _correlation(-0.5, CorrelationStrength.MODERATE, CorrelationDirection.NEGATIVE)
        )

        assert insight.type == InsightType.NEGATIVE
        assert "中程度の負の相関" in insight.message
        assert "減る傾向" in insight.message

    @pytest.mark.parametrize(
        "coefficient,strength,direction",
        [
            (0.05, CorrelationStrength.VERY_WEAK, CorrelationDirection.NONE),
            (0.15, CorrelationStrength.VERY_WEAK, CorrelationDirection.POSITIVE),
        ],
    )
    def test_neutral(self, coefficient, strength, direction):
        """Test that weak or directionless correlations are neutral."""
        insight = correlation_insight(_correlation(coefficient, strength, direction))

        assert insight.type == InsightType.NEUTRAL
        assert insight.message == "feedingとdiaperの間に明確な関連性は見られません"


class TestOutlierInsight:
    """Test outlier sentences."""

    @pytest.fixture
    def record(self, make_record):
        return make_record(
            datetime(2025, 4, 10, 3, 0), ActivityType.SLEEPING, duration=240
        )

    def test_extreme_is_warning(self, record):
        """Test that extreme outliers are warnings."""
        insight = outlier_insight(
            OutlierResult(
                record=record,
                metric=Metric.DURATION,
                value=240,
                method=OutlierMethod.ZSCORE,
                score=4.5,
                severity=OutlierSeverity.EXTREME,
            )
        )

        assert insight.type == InsightType.WARNING
        assert insight.message == "2025/4/10のsleepingの時間が極端に長いです（240）"

    def test_short_value_is_info(self, record):
        """Test that a negative score reads as short."""
        insight = outlier_insight(
            OutlierResult(
                record=record,
                metric=Metric.QUANTITY,
                value=5,
                method=OutlierMethod.ZSCORE,
                score=-3.2,
                severity=OutlierSeverity.MILD,
            )
        )

        assert insight.type == InsightType.INFO
        assert "量がやや短い" in insight.message

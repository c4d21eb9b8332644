"""
Japanese insight sentences for correlation and outlier results.

The sentences are keyed on the analytics vocabulary (strength, direction,
severity) and are meant to be shown as-is next to the numbers.
"""

from ..models import (
    CorrelationDirection,
    CorrelationResult,
    CorrelationStrength,
    Insight,
    InsightType,
    Metric,
    OutlierResult,
    OutlierSeverity,
)

STRENGTH_LABELS_JA = {
    CorrelationStrength.VERY_STRONG: "非常に強い",
    CorrelationStrength.STRONG: "強い",
    CorrelationStrength.MODERATE: "中程度の",
    CorrelationStrength.WEAK: "弱い",
}

SEVERITY_LABELS_JA = {
    OutlierSeverity.EXTREME: "極端に",
    OutlierSeverity.MODERATE: "著しく",
    OutlierSeverity.MILD: "やや",
}

METRIC_LABELS_JA = {
    Metric.DURATION: "時間",
    Metric.QUANTITY: "量",
}


def correlation_insight(correlation: CorrelationResult) -> Insight:
    """
    Describe a correlation in one sentence.

    Very weak or direction-less correlations get a neutral "no clear relation"
    sentence.
    """
    first = correlation.activity_type_1.value
    second = correlation.activity_type_2.value

    if (
        correlation.direction == CorrelationDirection.NONE
        or correlation.strength == CorrelationStrength.VERY_WEAK
    ):
        return Insight(
            message=f"{first}と{second}の間に明確な関連性は見られません",
            type=InsightType.NEUTRAL,
        )

    strength = STRENGTH_LABELS_JA[correlation.strength]
    coefficient = f"{correlation.coefficient:.2f}"
    if correlation.direction == CorrelationDirection.POSITIVE:
        return Insight(
            message=(
                f"{first}と{second}の間に{strength}正の相関があります（{coefficient}）。"
                f"{first}が増えると{second}も増える傾向があります"
            ),
            type=InsightType.POSITIVE,
        )
    return Insight(
        message=(
            f"{first}と{second}の間に{strength}負の相関があります（{coefficient}）。"
            f"{first}が増えると{second}は減る傾向があります"
        ),
        type=InsightType.NEGATIVE,
    )


def outlier_insight(outlier: OutlierResult) -> Insight:
    """Describe an outlier; extreme ones are warnings, the rest info."""
    record = outlier.record
    day = record.timestamp.date()
    metric = METRIC_LABELS_JA.get(outlier.metric, outlier.metric.value)
    severity = SEVERITY_LABELS_JA[outlier.severity]
    comparison = "長い" if outlier.score > 0 else "短い"

    return Insight(
        message=(
            f"{day.year}/{day.month}/{day.day}の{record.activity_type.value}の"
            f"{metric}が{severity}{comparison}です（{outlier.value:g}）"
        ),
        type=(
            InsightType.WARNING
            if outlier.severity == OutlierSeverity.EXTREME
            else InsightType.INFO
        ),
    )

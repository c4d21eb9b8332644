"""
Command-line interface for the Piyolog Analyzer package.

This module provides commands to import a Piyolog export and print its
statistics, trends, correlations and outliers, or save a full JSON report.
"""

import json
import logging
from datetime import datetime
from pathlib import Path

import click

from .analysis import (
    correlation_insight,
    filter_by_date_range,
    get_significant_trends,
    outlier_insight,
    overall_statistics,
)
from .exceptions import PiyologAnalyzerError
from .models import ActivityType, Metric, StatisticsSummary
from .pipeline import Pipeline
from .services import AnalysisService
from .settings import load_settings

ACTIVITY_CHOICES = click.Choice([t.value for t in ActivityType])
METRIC_CHOICES = click.Choice([Metric.DURATION.value, Metric.QUANTITY.value])

config_option = click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
verbose_option = click.option(
    "--verbose/--quiet",
    default=False,
    help="Enable verbose output",
)
export_argument = click.argument(
    "export_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)


# Configure basic logging
def configure_logging(verbose: bool = False) -> None:
    """Configure logging with appropriate level."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def _format_summary(label: str, summary: StatisticsSummary | None) -> str:
    if summary is None:
        return f"  {label}: no data"
    return (
        f"  {label}: n={summary.count} mean={summary.mean:.1f} "
        f"median={summary.median:.1f} sd={summary.std_dev:.1f} "
        f"range=[{summary.min:g}, {summary.max:g}]"
    )


@click.group()
def main():
    """
    Analyze Piyolog baby-activity exports.

    Imports a text or CSV export and reports descriptive statistics, daily
    trends, cross-activity correlations and outliers.
    """


@main.command()
@config_option
@verbose_option
@export_argument
def parse(config: Path | None, verbose: bool, export_file: Path) -> None:
    """Parse an export and report how many events and errors it contains."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(config)
        pipeline = Pipeline(settings)
        result = pipeline.load(export_file)
        parser = pipeline.loader.parser_for(export_file)

        click.echo(f"Records: {len(result.records)}")
        click.echo(f"Errors: {len(result.errors)}")
        if result.errors:
            click.echo("")
            click.echo(parser.format_errors(result.errors))

    except PiyologAnalyzerError as e:
        logger.error(f"Parsing failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@config_option
@verbose_option
@click.option(
    "--from-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Start date (YYYY-MM-DD)",
)
@click.option(
    "--to-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="End date, inclusive (YYYY-MM-DD)",
)
@export_argument
def stats(
    config: Path | None,
    verbose: bool,
    from_date: datetime | None,
    to_date: datetime | None,
    export_file: Path,
) -> None:
    """Show overall and per-activity statistics."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(config)
        pipeline = Pipeline(settings)
        records = pipeline.load(export_file).records
        records = filter_by_date_range(records, from_date, to_date)

        if not records:
            logger.warning("No records found in specified date range")
            return

        overall = overall_statistics(records)
        click.echo("\nActivity Summary Report")
        click.echo("=" * 40)
        click.echo(
            f"Period: {overall.date_range.earliest:%Y-%m-%d} to "
            f"{overall.date_range.latest:%Y-%m-%d} "
            f"({overall.date_range.duration_days} days)"
        )
        click.echo(f"Total Records: {overall.total_records}")
        click.echo(f"Records per Day: {overall.records_per_day:.1f}")

        for activity in AnalysisService(settings).statistics(records):
            click.echo(f"\n{activity.activity_type.value} ({activity.frequency})")
            click.echo("-" * 20)
            click.echo(_format_summary("duration (min)", activity.duration))
            click.echo(_format_summary("quantity", activity.quantity))
            buckets = activity.time_distribution.by_time_of_day
            click.echo(
                f"  morning={buckets.morning} afternoon={buckets.afternoon} "
                f"evening={buckets.evening} night={buckets.night}"
            )

    except PiyologAnalyzerError as e:
        logger.error(f"Statistics failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@config_option
@verbose_option
@click.option(
    "--activity",
    "activities",
    type=ACTIVITY_CHOICES,
    multiple=True,
    help="Activity type to analyze (repeatable, defaults to all)",
)
@click.option(
    "--significant-only/--all",
    default=False,
    help="Only show medium/high significance trends",
)
@export_argument
def trends(
    config: Path | None,
    verbose: bool,
    activities: tuple[str, ...],
    significant_only: bool,
    export_file: Path,
) -> None:
    """Show daily trends per activity."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(config)
        records = Pipeline(settings).load(export_file).records
        types = [ActivityType(a) for a in activities] or None
        by_type = AnalysisService(settings).trends(records, types)

        for activity_type, analyses in by_type.items():
            if significant_only:
                analyses = get_significant_trends(analyses)
            for trend in analyses:
                if not trend.has_enough_data:
                    click.echo(
                        f"{activity_type.value}/{trend.metric.value}: "
                        f"not enough data yet ({trend.data_points} days)"
                    )
                    continue
                click.echo(
                    f"{activity_type.value}/{trend.metric.value}: "
                    f"{trend.direction.value} {trend.magnitude:+.3f}/day "
                    f"(R²={trend.confidence:.2f}, {trend.significance.value})"
                )

    except PiyologAnalyzerError as e:
        logger.error(f"Trend analysis failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@config_option
@verbose_option
@export_argument
def correlations(config: Path | None, verbose: bool, export_file: Path) -> None:
    """Show correlations between activities' daily frequencies."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(config)
        records = Pipeline(settings).load(export_file).records
        results = AnalysisService(settings).correlations(records)

        if not results:
            click.echo("Not enough data for correlations yet")
            return

        for result in results:
            click.echo(
                f"{result.activity_type_1.value} ~ {result.activity_type_2.value}: "
                f"r={result.coefficient:+.2f} ({result.strength.value}, "
                f"n={result.sample_size})"
            )
            click.echo(f"  {correlation_insight(result).message}")

    except PiyologAnalyzerError as e:
        logger.error(f"Correlation analysis failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@config_option
@verbose_option
@click.option("--activity", type=ACTIVITY_CHOICES, required=True)
@click.option("--metric", type=METRIC_CHOICES, default=Metric.DURATION.value)
@export_argument
def outliers(
    config: Path | None,
    verbose: bool,
    activity: str,
    metric: str,
    export_file: Path,
) -> None:
    """Show outlying durations or quantities for one activity."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(config)
        records = Pipeline(settings).load(export_file).records
        found = AnalysisService(settings).outliers(
            records, ActivityType(activity), Metric(metric)
        )

        if not found:
            click.echo("No outliers found")
            return

        for outlier in found:
            click.echo(
                f"{outlier.record.timestamp:%Y-%m-%d %H:%M} {outlier.value:g} "
                f"[{outlier.method.value} {outlier.score:+.2f}, "
                f"{outlier.severity.value}]"
            )
            click.echo(f"  {outlier_insight(outlier).message}")

    except PiyologAnalyzerError as e:
        logger.error(f"Outlier detection failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@config_option
@verbose_option
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the JSON report to this file instead of stdout",
)
@export_argument
def report(
    config: Path | None, verbose: bool, output: Path | None, export_file: Path
) -> None:
    """Run every analysis and emit a JSON report."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(config)
        parse_result, analytics = Pipeline(settings).run(export_file)

        payload = {
            "source": export_file.name,
            "parse": {
                "records": len(parse_result.records),
                "errors": [e.model_dump(mode="json") for e in parse_result.errors],
            },
            "analytics": analytics.model_dump(mode="json"),
        }
        text = json.dumps(payload, indent=2, ensure_ascii=False, default=str)

        if output is None:
            click.echo(text)
        else:
            output.write_text(text, encoding="utf-8")
            logger.info(f"Report saved to {output}")

    except PiyologAnalyzerError as e:
        logger.error(f"Report generation failed: {str(e)}")
        raise click.Abort() from e


if __name__ == "__main__":
    main()

"""
End-to-end pipeline: export file in, parse result and analytics report out.

The pipeline stays thin: loading and parsing are delegated to RecordLoader,
analysis to AnalysisService.
"""

import logging
from pathlib import Path

from .data import RecordLoader
from .exceptions import PiyologAnalyzerError, ProcessingError
from .models import ActivityType, AnalyticsReport, CsvParseResult, TextParseResult
from .services import AnalysisService
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)

ParseResult = TextParseResult | CsvParseResult


class Pipeline:
    """
    Import-and-analyze pipeline.

    Parse errors never stop the pipeline: whatever records could be extracted
    are analyzed and the errors are returned alongside for reporting.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the pipeline.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.loader = RecordLoader(settings)
        self.analysis_service = AnalysisService(settings)
        self.logger = logging.getLogger(__name__)

    def load(self, path: Path) -> ParseResult:
        """Load and parse an export file, assigning record ids."""
        return self.loader.load(path)

    def run(
        self, path: Path, activity_types: list[ActivityType] | None = None
    ) -> tuple[ParseResult, AnalyticsReport]:
        """
        Load an export and analyze its records.

        Args:
            path: Path to a text or CSV export
            activity_types: Types to analyze (defaults to all present)

        Returns:
            Tuple of (parse result, analytics report)

        Raises:
            PiyologAnalyzerError: If loading or analysis fails
        """
        try:
            self.logger.info("=" * 60)
            self.logger.info(f"Importing {path}")
            parse_result = self.load(path)

            report = self.analysis_service.run_with_timeout(
                parse_result.records, activity_types
            )

            self.logger.info(
                f"Analyzed {report.overall.total_records} records "
                f"({len(parse_result.errors)} parse errors)"
            )
            self.logger.info("=" * 60)
            return parse_result, report

        except PiyologAnalyzerError:
            raise
        except Exception as e:
            self.logger.error(f"Pipeline failed: {e}")
            raise ProcessingError(f"Pipeline execution failed: {e}") from e


def run_pipeline(export_path: str, config_path: str | None = None) -> AnalyticsReport:
    """
    Run the pipeline for one export file.

    Args:
        export_path: Path to the export file
        config_path: Optional path to a YAML configuration file

    Returns:
        Analytics report
    """
    settings = load_settings(Path(config_path) if config_path else None)
    _, report = Pipeline(settings).run(Path(export_path))
    return report

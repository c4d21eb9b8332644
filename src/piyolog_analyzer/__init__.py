"""Piyolog Analyzer - parse baby-activity exports and analyze them."""

__version__ = "0.3.0"

from . import analysis, constants, data, exceptions, models, services
from .data import CsvParser, RecordLoader, TextParser, parse_csv, parse_text
from .models import (
    ActivityType,
    AnalyticsReport,
    CorrelationResult,
    Metric,
    OutlierResult,
    ParseError,
    Record,
    TextParseResult,
    TrendAnalysis,
)
from .pipeline import Pipeline
from .services import AnalysisService


def get_version() -> str:
    """Get the current version of piyolog_analyzer."""
    return __version__


def get_package_info() -> dict[str, str]:
    """Get package information including name and version."""
    return {
        "name": "piyolog-analyzer",
        "version": __version__,
        "description": "Parse Piyolog baby-activity exports and analyze them",
    }


__all__ = [
    # Version & Info
    "get_version",
    "get_package_info",
    # Models
    "ActivityType",
    "AnalyticsReport",
    "CorrelationResult",
    "Metric",
    "OutlierResult",
    "ParseError",
    "Record",
    "TextParseResult",
    "TrendAnalysis",
    # Parsing
    "CsvParser",
    "RecordLoader",
    "TextParser",
    "parse_csv",
    "parse_text",
    # Services
    "AnalysisService",
    # Pipeline
    "Pipeline",
    # Modules
    "analysis",
    "constants",
    "data",
    "exceptions",
    "models",
    "services",
]

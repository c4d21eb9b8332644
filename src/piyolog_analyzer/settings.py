"""Application settings and configuration management."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    CorrelationThresholds,
    DisplayLimits,
    ExecutionDefaults,
    ExportMarkers,
    OutlierThresholds,
    TrendThresholds,
)
from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings for Piyolog Analyzer.

    Settings are loaded in the following order of precedence (highest to lowest):
    1. Values from a YAML config file passed to ``load_settings``
    2. Environment variables (e.g., PIYOLOG_ANALYZER_ZSCORE_THRESHOLD)
    3. .env file (if found)
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="PIYOLOG_ANALYZER_", env_file=".env", extra="ignore"
    )

    # --- Parsing ---
    default_filename: str = ExportMarkers.DEFAULT_FILENAME
    max_displayed_errors: int = DisplayLimits.MAX_DISPLAYED_ERRORS
    # Event lines seen before the first date header are dropped silently
    # unless this is enabled
    report_orphan_events: bool = False

    # --- Trends ---
    trend_stability_threshold: float = TrendThresholds.STABILITY_THRESHOLD
    min_days_for_trend: int = TrendThresholds.MIN_DAYS_FOR_TREND

    # --- Correlations ---
    min_days_for_correlation: int = CorrelationThresholds.MIN_DAYS_FOR_CORRELATION
    correlation_direction_threshold: float = CorrelationThresholds.DIRECTION_THRESHOLD

    # --- Outliers ---
    zscore_threshold: float = OutlierThresholds.ZSCORE_THRESHOLD
    iqr_multiplier: float = OutlierThresholds.IQR_MULTIPLIER
    min_outlier_samples: int = OutlierThresholds.MIN_SAMPLES
    iqr_quartile_method: Literal["floor", "linear"] = "floor"

    # --- Execution ---
    analysis_timeout_seconds: float = ExecutionDefaults.TIMEOUT_SECONDS
    max_workers: int = ExecutionDefaults.MAX_WORKERS

    @field_validator(
        "max_displayed_errors",
        "min_days_for_trend",
        "min_days_for_correlation",
        "min_outlier_samples",
        "max_workers",
    )
    @classmethod
    def check_positive_int(cls, v: int, info) -> int:
        """Validate counts are at least 1."""
        if v < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return v

    @field_validator(
        "trend_stability_threshold",
        "correlation_direction_threshold",
        "zscore_threshold",
        "iqr_multiplier",
        "analysis_timeout_seconds",
    )
    @classmethod
    def check_positive_float(cls, v: float, info) -> float:
        """Validate thresholds are strictly positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return v


def load_settings(config_file: Path | None = None) -> Settings:
    """Load settings from a YAML file, environment variables, and defaults."""
    if config_file:
        try:
            with open(config_file, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to read config file {config_file}: {e}"
            ) from e

        if not isinstance(yaml_settings, dict):
            raise ConfigurationError(
                f"Config file {config_file} must contain a mapping"
            )

        return Settings(**yaml_settings)

    return Settings()

"""
Shared pytest fixtures for Piyolog Analyzer tests.

This module provides reusable fixtures for:
- Export texts (single day, one week)
- Record factories
- Settings configurations
- Temporary export and config files
"""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest
import yaml

from piyolog_analyzer.models import ActivityType, Record, RecordMetadata
from piyolog_analyzer.settings import Settings

IMPORTED_AT = datetime(2025, 5, 1, 9, 0)

WEEKDAYS_JA = ["月", "火", "水", "木", "金", "土", "日"]

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Provide default settings."""
    return Settings()


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary YAML config file path for testing."""
    return tmp_path / "config.yaml"


@pytest.fixture
def sample_config_dict() -> dict:
    """Provide a sample configuration dictionary."""
    return {
        "max_displayed_errors": 5,
        "report_orphan_events": True,
        "trend_stability_threshold": 0.05,
        "min_days_for_trend": 5,
        "zscore_threshold": 2.5,
        "iqr_quartile_method": "linear",
        "analysis_timeout_seconds": 10,
    }


@pytest.fixture
def sample_config_file(tmp_path: Path, sample_config_dict: dict) -> Path:
    """Create a temporary config file with sample data."""
    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)
    return config_path


# ============================================================================
# Record Fixtures
# ============================================================================


@pytest.fixture
def metadata() -> RecordMetadata:
    """Provide fixed import metadata."""
    return RecordMetadata(imported_at=IMPORTED_AT, imported_filename="test.txt")


@pytest.fixture
def make_record(metadata: RecordMetadata) -> Callable[..., Record]:
    """
    Provide a factory for records.

    Usage: ``make_record("2025-04-10T11:42", ActivityType.FEEDING, duration=20)``
    """

    def _make(
        timestamp: datetime | str,
        activity_type: ActivityType = ActivityType.FEEDING,
        duration: float | None = None,
        quantity: float | None = None,
        notes: str | None = None,
        record_id: int | str | None = None,
    ) -> Record:
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return Record(
            id=record_id,
            timestamp=timestamp,
            activity_type=activity_type,
            duration=duration,
            quantity=quantity,
            notes=notes,
            metadata=metadata,
        )

    return _make


# ============================================================================
# Export Text Fixtures
# ============================================================================


@pytest.fixture
def sample_export_text() -> str:
    """
    Provide a one-day export with seven events and summary lines.

    Mirrors the layout of a real Piyolog share text.
    """
    return "\n".join(
        [
            "【ぴよログ】2025年4月",
            "----------",
            "2025/4/10(木)",
            "しゅん (0か月0日)",
            "",
            "11:25   体重 2.64kg",
            "11:42   母乳 左10分 ▶ 右10分",
            "13:00   ミルク 60ml",
            "14:10   おしっこ",
            "15:30   睡眠",
            "18:00   体温 36.8°C",
            "20:05   お風呂",
            "",
            "母乳合計　左 10分 / 右 10分",
            "ミルク合計　1回 60ml",
            "メモ 今日はよく寝た",
            "----------",
        ]
    )


@pytest.fixture
def week_export_text() -> str:
    """
    Provide seven consecutive days of feeding and weight events.

    Daily nursing time grows 20, 22, ..., 32 minutes and weight grows
    0.04 kg per day.
    """
    lines = ["【ぴよログ】2025年4月", "----------"]
    for offset in range(7):
        day = 10 + offset
        side = 10 + offset
        weight = 3.00 + 0.04 * offset
        lines += [
            f"2025/4/{day}({WEEKDAYS_JA[(3 + offset) % 7]})",
            f"しゅん (0か月{offset}日)",
            "",
            f"8:00   体重 {weight:.2f}kg",
            f"9:30   母乳 左{side}分 ▶ 右{side}分",
            f"母乳合計　左 {side}分 / 右 {side}分",
            "----------",
        ]
    return "\n".join(lines)


@pytest.fixture
def sample_csv_text() -> str:
    """Provide a small CSV export."""
    return "\n".join(
        [
            "timestamp,activity_type,duration_minutes,quantity_ml,notes",
            "2025-04-10T11:42:00,feeding,20,,左10分 右10分",
            "2025-04-10T13:00:00,Feeding,,60,ミルク",
            "2025-04-10T14:10:00,diaper,,,おしっこ",
        ]
    )


@pytest.fixture
def export_file(tmp_path: Path, sample_export_text: str) -> Path:
    """Write the one-day export to a temporary .txt file."""
    path = tmp_path / "piyolog.txt"
    path.write_text(sample_export_text, encoding="utf-8")
    return path


@pytest.fixture
def week_export_file(tmp_path: Path, week_export_text: str) -> Path:
    """Write the one-week export to a temporary .txt file."""
    path = tmp_path / "week.txt"
    path.write_text(week_export_text, encoding="utf-8")
    return path


@pytest.fixture
def csv_export_file(tmp_path: Path, sample_csv_text: str) -> Path:
    """Write the CSV export to a temporary .csv file."""
    path = tmp_path / "piyolog.csv"
    path.write_text(sample_csv_text, encoding="utf-8")
    return path

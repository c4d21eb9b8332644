"""Unit tests for the Piyolog text export parser."""

from datetime import date, datetime

import pytest

from piyolog_analyzer.data.text_parser import (
    DetailKind,
    ScanState,
    TextParser,
    classify_activity,
    format_parse_errors,
    parse_breast_feeding,
    parse_milk,
    parse_text,
    scan_line,
    split_event_text,
)
from piyolog_analyzer.exceptions import ParsingError
from piyolog_analyzer.models import ActivityType, ParseError, RecordMetadata
from piyolog_analyzer.settings import Settings


def _day_block(*event_lines: str, day: str = "2025/4/10(木)") -> str:
    return "\n".join(["【ぴよログ】2025年4月", "----------", day, *event_lines])


class TestParseWellFormedExport:
    """Test parsing of well-formed exports."""

    def test_every_event_line_becomes_a_record(self, sample_export_text: str):
        """Test that N valid event lines yield N records and no errors."""
        result = parse_text(sample_export_text)

        assert len(result.records) == 7
        assert result.errors == []
        assert result.parsed_event_count == 7
        assert result.total_lines == len(sample_export_text.split("\n"))

    def test_activity_types_in_order(self, sample_export_text: str):
        """Test that records keep file order and are classified correctly."""
        result = parse_text(sample_export_text)

        assert [r.activity_type for r in result.records] == [
            ActivityType.WEIGHT,
            ActivityType.FEEDING,
            ActivityType.FEEDING,
            ActivityType.DIAPER,
            ActivityType.SLEEPING,
            ActivityType.TEMPERATURE,
            ActivityType.BATH,
        ]

    def test_timestamp_combines_date_and_time(self, sample_export_text: str):
        """Test that event times are combined with the date header."""
        result = parse_text(sample_export_text)

        assert result.records[0].timestamp == datetime(2025, 4, 10, 11, 25)
        assert result.records[-1].timestamp == datetime(2025, 4, 10, 20, 5)

    def test_measurements_extracted(self, sample_export_text: str):
        """Test that weight, milk and temperature values become quantities."""
        records = parse_text(sample_export_text).records

        assert records[0].quantity == pytest.approx(2.64)
        assert records[2].quantity == 60
        assert records[5].quantity == pytest.approx(36.8)

    def test_records_have_no_ids(self, sample_export_text: str):
        """Test that the parser leaves id assignment to the caller."""
        records = parse_text(sample_export_text).records

        assert all(r.id is None for r in records)

    def test_metadata_stamped(self, sample_export_text: str):
        """Test that import metadata is attached to each record."""
        imported_at = datetime(2025, 5, 1, 12, 0)

        result = parse_text(sample_export_text, "export.txt", imported_at=imported_at)

        assert all(r.metadata.imported_filename == "export.txt" for r in result.records)
        assert all(r.metadata.imported_at == imported_at for r in result.records)

    def test_default_filename(self, sample_export_text: str):
        """Test that the default source identifier is used."""
        result = parse_text(sample_export_text)

        assert result.records[0].metadata.imported_filename == "piyolog.txt"

    def test_empty_text(self):
        """Test that empty input yields an empty result."""
        result = parse_text("")

        assert result.records == []
        assert result.errors == []
        assert result.total_lines == 1


class TestPartialSuccess:
    """Test that malformed lines are isolated as errors."""

    def test_unknown_activity_isolated(self):
        """Test that one unknown event yields one error and keeps the others."""
        text = _day_block(
            "9:00   ミルク 80ml",
            "10:00   ダンス 5分",
            "11:00   おしっこ",
        )

        result = parse_text(text)

        assert len(result.records) == 2
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.line == 5
        assert error.message == "Unknown activity type: ダンス"
        assert error.raw_text == "10:00   ダンス 5分"

    def test_invalid_time_reported(self):
        """Test that an impossible clock time is a line error."""
        result = parse_text(_day_block("25:10   ミルク 80ml"))

        assert result.records == []
        assert result.errors[0].message == "Invalid time: 25:10"

    def test_invalid_date_reported_and_clears_context(self):
        """Test that an impossible date errors and drops its events."""
        text = _day_block("9:00   ミルク 80ml", day="2025/2/30(日)")

        result = parse_text(text)

        assert result.records == []
        assert len(result.errors) == 1
        assert result.errors[0].message == "Invalid date: 2025/2/30"

    def test_parse_never_raises_on_garbage(self):
        """Test that arbitrary text is tolerated."""
        result = parse_text("\n".join(["???", "12:", "::::", "【】", "2025/13/"]))

        assert result.records == []
        assert result.errors == []

    def test_non_text_input_raises(self):
        """Test that bytes are a structural failure, not a line error."""
        with pytest.raises(ParsingError):
            parse_text(b"2025/4/10(\xe6\x9c\xa8)")

    def test_windows_line_endings(self):
        """Test that CRLF exports parse like LF ones."""
        text = _day_block("9:00   ミルク 80ml").replace("\n", "\r\n")

        assert len(parse_text(text).records) == 1


class TestMultiDayExport:
    """Test date context across several day blocks."""

    def test_two_day_blocks(self):
        """Test that events inherit the date of their own block."""
        text = "\n".join(
            [
                "【ぴよログ】2025年4月",
                "----------",
                "2025/4/10(木)",
                "9:00   ミルク 80ml",
                "----------",
                "2025/4/11(金)",
                "9:00   ミルク 90ml",
            ]
        )

        records = parse_text(text).records

        assert len(records) == 2
        assert (records[1].timestamp.date() - records[0].timestamp.date()).days == 1
        assert records[0].timestamp.date() == date(2025, 4, 10)
        assert records[1].timestamp.date() == date(2025, 4, 11)

    def test_week_export(self, week_export_text: str):
        """Test that a week of blocks yields two records per day."""
        result = parse_text(week_export_text)

        assert len(result.records) == 14
        assert result.errors == []
        days = {r.timestamp.date() for r in result.records}
        assert len(days) == 7


class TestSkippedLines:
    """Test lines that never produce records or errors."""

    def test_summary_lines_suppressed(self):
        """Test that summary and diary lines are silently consumed."""
        text = _day_block(
            "母乳合計　左 10分 / 右 10分",
            "ミルク合計　2回 160ml",
            "メモ ご機嫌",
            "今日は散歩に行った",
        )

        result = parse_text(text)

        assert result.records == []
        assert result.errors == []

    def test_child_info_line_skipped(self):
        """Test that the child name/age line is skipped."""
        result = parse_text(_day_block("しゅん (1か月3日)"))

        assert result.records == []
        assert result.errors == []

    def test_orphan_events_silent_by_default(self):
        """Test that events before any date header are dropped silently."""
        result = parse_text("9:00   ミルク 80ml")

        assert result.records == []
        assert result.errors == []

    def test_orphan_events_reported_when_enabled(self):
        """Test that orphan events become errors when requested."""
        result = parse_text("9:00   ミルク 80ml", report_orphan_events=True)

        assert result.records == []
        assert len(result.errors) == 1
        assert result.errors[0].message == "Event line before any date header"


class TestScanLine:
    """Test the single-line scanner."""

    @pytest.fixture
    def line_metadata(self) -> RecordMetadata:
        return RecordMetadata(imported_at=datetime(2025, 5, 1))

    def test_header_sets_year_and_month(self, line_metadata: RecordMetadata):
        """Test that a month header updates the scan state."""
        outcome = scan_line(ScanState(), "【ぴよログ】2025年4月", 1, line_metadata)

        assert outcome.state.year == 2025
        assert outcome.state.month == 4
        assert outcome.record is None
        assert outcome.error is None

    def test_date_line_sets_current_date(self, line_metadata: RecordMetadata):
        """Test that a date line sets the current date."""
        outcome = scan_line(ScanState(), "2025/4/10(木)", 1, line_metadata)

        assert outcome.state.current_date == date(2025, 4, 10)

    def test_input_state_not_mutated(self, line_metadata: RecordMetadata):
        """Test that scanning returns a new state."""
        state = ScanState()

        scan_line(state, "2025/4/10(木)", 1, line_metadata)

        assert state.current_date is None

    def test_event_line_emits_record(self, line_metadata: RecordMetadata):
        """Test that an event under a date emits a record."""
        state = ScanState(current_date=date(2025, 4, 10))

        outcome = scan_line(state, "  7:05   うんち  ", 4, line_metadata)

        assert outcome.record is not None
        assert outcome.record.activity_type == ActivityType.DIAPER
        assert outcome.record.timestamp == datetime(2025, 4, 10, 7, 5)
        assert outcome.state == state


class TestSplitEventText:
    """Test label/detail splitting."""

    def test_split_on_whitespace_run(self):
        """Test that a run of 2+ spaces separates label and detail."""
        assert split_event_text("母乳  左10分 ▶ 右10分") == ("母乳", "左10分 ▶ 右10分")

    def test_fallback_to_single_space(self):
        """Test that a single space separates when no run exists."""
        assert split_event_text("ミルク 60ml") == ("ミルク", "60ml")

    def test_label_only(self):
        """Test that a bare label has empty detail."""
        assert split_event_text("睡眠") == ("睡眠", "")

    def test_ideographic_space(self):
        """Test that full-width spaces count as whitespace."""
        assert split_event_text("体重　3.1kg") == ("体重", "3.1kg")


class TestClassifyActivity:
    """Test keyword classification."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("母乳", ActivityType.FEEDING),
            ("ミルク", ActivityType.FEEDING),
            ("睡眠", ActivityType.SLEEPING),
            ("おしっこ", ActivityType.DIAPER),
            ("うんち", ActivityType.DIAPER),
            ("体重", ActivityType.WEIGHT),
            ("身長", ActivityType.HEIGHT),
            ("体温", ActivityType.TEMPERATURE),
            ("お風呂", ActivityType.BATH),
            ("病院", ActivityType.HOSPITAL),
            ("くすり", ActivityType.MEDICINE),
            ("散歩", ActivityType.WALK),
            ("その他", ActivityType.WALK),
        ],
    )
    def test_known_keywords(self, label: str, expected: ActivityType):
        """Test each supported keyword."""
        entry = classify_activity(label)

        assert entry is not None
        assert entry.activity_type == expected

    def test_unknown_keyword(self):
        """Test that unknown labels are not classified."""
        assert classify_activity("ダンス") is None

    def test_expressed_milk_uses_milk_details(self):
        """Test that 搾母乳 is matched before its substring 母乳."""
        entry = classify_activity("搾母乳")

        assert entry.activity_type == ActivityType.FEEDING
        assert entry.detail_kind == DetailKind.MILK

    def test_expressed_milk_quantity(self):
        """Test that expressed milk volume is extracted."""
        record = parse_text(_day_block("10:00   搾母乳 80ml")).records[0]

        assert record.quantity == 80
        assert record.duration is None


class TestBreastFeeding:
    """Test breastfeeding duration extraction."""

    def test_both_sides_summed(self):
        """Test that left and right minutes are added."""
        detail = parse_breast_feeding("左10分 ▶ 右10分")

        assert detail.duration == 20
        assert detail.notes == "左10分 右10分"

    def test_slash_separator(self):
        """Test that a slash also joins both sides."""
        assert parse_breast_feeding("左7分 / 右3分").duration == 10

    def test_right_then_left(self):
        """Test that right-first order is summed too."""
        detail = parse_breast_feeding("右8分 ▶ 左4分")

        assert detail.duration == 12
        assert detail.notes == "左4分 右8分"

    def test_left_only(self):
        """Test left side only."""
        assert parse_breast_feeding("左5分").duration == 5

    def test_right_only(self):
        """Test right side only."""
        assert parse_breast_feeding("右8分").duration == 8

    def test_no_minutes_keeps_text(self):
        """Test that unparseable detail is kept as notes."""
        detail = parse_breast_feeding("たくさん")

        assert detail.duration is None
        assert detail.notes == "たくさん"


class TestDetailParsers:
    """Test the remaining detail sub-parsers through full lines."""

    def test_milk_keeps_raw_notes(self):
        """Test that milk notes preserve the raw detail."""
        detail = parse_milk("60ml 完飲")

        assert detail.quantity == 60
        assert detail.notes == "60ml 完飲"

    def test_milk_without_volume(self):
        """Test that milk without ml has no quantity."""
        assert parse_milk("少し").quantity is None

    def test_height(self):
        """Test height extraction in cm."""
        record = parse_text(_day_block("10:00   身長 50.5cm")).records[0]

        assert record.activity_type == ActivityType.HEIGHT
        assert record.quantity == pytest.approx(50.5)

    def test_plain_event_uses_detail_as_notes(self):
        """Test that plain events keep their detail as notes."""
        record = parse_text(_day_block("10:00   くすり  ビタミンD")).records[0]

        assert record.activity_type == ActivityType.MEDICINE
        assert record.notes == "ビタミンD"

    def test_plain_event_without_detail_uses_label(self):
        """Test that a bare label becomes the notes."""
        record = parse_text(_day_block("10:00   お風呂")).records[0]

        assert record.notes == "お風呂"


class TestFormatParseErrors:
    """Test error rendering."""

    def test_empty(self):
        """Test that no errors render as an empty string."""
        assert format_parse_errors([]) == ""

    def test_single_error_with_raw_text(self):
        """Test line, message and quoted raw text."""
        errors = [ParseError(line=3, message="Unknown activity type: X", raw_text="9:00 X")]

        assert format_parse_errors(errors) == (
            'Line 3: Unknown activity type: X\n  "9:00 X"'
        )

    def test_truncated_after_limit(self):
        """Test that only ten errors are shown verbatim."""
        errors = [ParseError(line=i + 1, message=f"error {i}") for i in range(12)]

        text = format_parse_errors(errors)

        assert "Line 10: error 9" in text
        assert "Line 11" not in text
        assert text.endswith("...and 2 more errors")

    def test_parser_uses_configured_limit(self):
        """Test that TextParser honors max_displayed_errors."""
        parser = TextParser(Settings(max_displayed_errors=2))
        errors = [ParseError(line=i + 1, message="bad") for i in range(5)]

        text = parser.format_errors(errors)

        assert text.count("Line ") == 2
        assert text.endswith("...and 3 more errors")


class TestTextParser:
    """Test the settings-driven parser class."""

    def test_parse_with_default_filename(self, sample_export_text: str):
        """Test that the configured default filename is applied."""
        parser = TextParser(Settings(default_filename="shared.txt"))

        result = parser.parse(sample_export_text)

        assert result.records[0].metadata.imported_filename == "shared.txt"

    def test_orphan_policy_from_settings(self):
        """Test that report_orphan_events is read from settings."""
        parser = TextParser(Settings(report_orphan_events=True))

        result = parser.parse("9:00   ミルク 80ml", "x.txt")

        assert len(result.errors) == 1

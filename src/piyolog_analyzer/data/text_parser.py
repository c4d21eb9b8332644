"""
Piyolog text export parser.

The export is a loosely structured, line-oriented Japanese text block::

    【ぴよログ】2025年4月
    ----------
    2025/4/10(木)
    しゅん (0か月0日)

    11:25   体重 2.64kg
    11:42   母乳 左10分 ▶ 右10分
    母乳合計　左 10分 / 右 10分

Parsing is a left fold over lines: an immutable ``ScanState`` (current date,
header year/month) is threaded through ``scan_line``, which returns the next
state plus at most one record and at most one error. Malformed lines become
``ParseError`` values; parsing a text never raises for bad input.
"""

import logging
import re
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum

from ..constants import DisplayLimits, ExportMarkers
from ..exceptions import ParsingError
from ..models import (
    ActivityType,
    ParseError,
    Record,
    RecordMetadata,
    TextParseResult,
)
from ..settings import Settings

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(r"^【[^】]+】(\d{4})年(\d{1,2})月$")
DATE_PATTERN = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})\([^)]+\)$")
CHILD_INFO_PATTERN = re.compile(r"^(.+?)\s+\((\d+)か月(\d+)日\)$")
EVENT_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})\s+(.+)$")

FIELD_SEPARATOR_PATTERN = re.compile(r"\s{2,}")
WHITESPACE_PATTERN = re.compile(r"\s")

LEFT_RIGHT_PATTERN = re.compile(r"左(\d+)分\s*[▶/]\s*右(\d+)分")
RIGHT_LEFT_PATTERN = re.compile(r"右(\d+)分\s*[▶/]\s*左(\d+)分")
LEFT_ONLY_PATTERN = re.compile(r"左(\d+)分")
RIGHT_ONLY_PATTERN = re.compile(r"右(\d+)分")
MILLILITER_PATTERN = re.compile(r"(\d+)ml")
KILOGRAM_PATTERN = re.compile(r"(\d+\.?\d*)kg")
CENTIMETER_PATTERN = re.compile(r"(\d+\.?\d*)cm")
CELSIUS_PATTERN = re.compile(r"(\d+\.?\d*)°C")


class DetailKind(str, Enum):
    """Sub-parser used for the detail text of an event."""

    BREAST = "breast"
    MILK = "milk"
    WEIGHT = "weight"
    HEIGHT = "height"
    TEMPERATURE = "temperature"
    PLAIN = "plain"


@dataclass(frozen=True)
class ActivityKeyword:
    """Keyword found in an event label and what it classifies as."""

    keyword: str
    activity_type: ActivityType
    detail_kind: DetailKind


# Priority order matters: the first keyword contained in the label wins, and
# "搾母乳" must be checked before its substring "母乳".
ACTIVITY_KEYWORDS: tuple[ActivityKeyword, ...] = (
    ActivityKeyword("搾母乳", ActivityType.FEEDING, DetailKind.MILK),
    ActivityKeyword("母乳", ActivityType.FEEDING, DetailKind.BREAST),
    ActivityKeyword("ミルク", ActivityType.FEEDING, DetailKind.MILK),
    ActivityKeyword("睡眠", ActivityType.SLEEPING, DetailKind.PLAIN),
    ActivityKeyword("おしっこ", ActivityType.DIAPER, DetailKind.PLAIN),
    ActivityKeyword("うんち", ActivityType.DIAPER, DetailKind.PLAIN),
    ActivityKeyword("体重", ActivityType.WEIGHT, DetailKind.WEIGHT),
    ActivityKeyword("身長", ActivityType.HEIGHT, DetailKind.HEIGHT),
    ActivityKeyword("体温", ActivityType.TEMPERATURE, DetailKind.TEMPERATURE),
    ActivityKeyword("お風呂", ActivityType.BATH, DetailKind.PLAIN),
    ActivityKeyword("病院", ActivityType.HOSPITAL, DetailKind.PLAIN),
    ActivityKeyword("くすり", ActivityType.MEDICINE, DetailKind.PLAIN),
    ActivityKeyword("その他", ActivityType.WALK, DetailKind.PLAIN),
    ActivityKeyword("散歩", ActivityType.WALK, DetailKind.PLAIN),
)


@dataclass(frozen=True)
class ScanState:
    """Context carried from one line to the next."""

    current_date: date | None = None
    year: int | None = None
    month: int | None = None


@dataclass(frozen=True)
class LineOutcome:
    """Result of scanning a single line."""

    state: ScanState
    record: Record | None = None
    error: ParseError | None = None


@dataclass(frozen=True)
class EventDetail:
    """Values extracted from an event's detail text."""

    duration: float | None = None
    quantity: float | None = None
    notes: str | None = None


def classify_activity(event_type: str) -> ActivityKeyword | None:
    """
    Classify an event label by keyword containment.

    Args:
        event_type: Label text of the event (e.g. "母乳", "ミルク")

    Returns:
        The first matching keyword entry, or None if no keyword matches
    """
    for entry in ACTIVITY_KEYWORDS:
        if entry.keyword in event_type:
            return entry
    return None


def split_event_text(event_text: str) -> tuple[str, str]:
    """
    Split the text after the time prefix into label and detail.

    Splits on the first run of two or more whitespace characters; when the
    text contains no such run, falls back to the first single whitespace.

    Args:
        event_text: Text following ``H:MM`` on an event line

    Returns:
        Tuple of (event type label, detail text), both stripped
    """
    parts = FIELD_SEPARATOR_PATTERN.split(event_text)
    if len(parts) == 1:
        match = WHITESPACE_PATTERN.search(event_text)
        if match and match.start() > 0:
            parts = [event_text[: match.start()], event_text[match.start() + 1 :]]
        else:
            parts = [event_text]

    event_type = parts[0].strip()
    details = " ".join(parts[1:]).strip()
    return event_type, details


def parse_breast_feeding(text: str) -> EventDetail:
    """Extract left/right nursing minutes; both sides are summed."""
    match = LEFT_RIGHT_PATTERN.search(text)
    if match:
        left, right = int(match.group(1)), int(match.group(2))
        return EventDetail(duration=left + right, notes=f"左{left}分 右{right}分")

    match = RIGHT_LEFT_PATTERN.search(text)
    if match:
        right, left = int(match.group(1)), int(match.group(2))
        return EventDetail(duration=left + right, notes=f"左{left}分 右{right}分")

    match = LEFT_ONLY_PATTERN.search(text)
    if match:
        left = int(match.group(1))
        return EventDetail(duration=left, notes=f"左{left}分")

    match = RIGHT_ONLY_PATTERN.search(text)
    if match:
        right = int(match.group(1))
        return EventDetail(duration=right, notes=f"右{right}分")

    return EventDetail(notes=text or None)


def parse_milk(text: str) -> EventDetail:
    """Extract a volume in ml; the raw text is always kept as notes."""
    match = MILLILITER_PATTERN.search(text)
    quantity = int(match.group(1)) if match else None
    return EventDetail(quantity=quantity, notes=text or None)


def _parse_measurement(text: str, pattern: re.Pattern) -> EventDetail:
    match = pattern.search(text)
    quantity = float(match.group(1)) if match else None
    return EventDetail(quantity=quantity, notes=text or None)


def parse_weight(text: str) -> EventDetail:
    """Extract a weight in kg."""
    return _parse_measurement(text, KILOGRAM_PATTERN)


def parse_height(text: str) -> EventDetail:
    """Extract a height in cm."""
    return _parse_measurement(text, CENTIMETER_PATTERN)


def parse_temperature(text: str) -> EventDetail:
    """Extract a body temperature in °C."""
    return _parse_measurement(text, CELSIUS_PATTERN)


def parse_detail(kind: DetailKind, event_type: str, details: str) -> EventDetail:
    """
    Dispatch detail text to the sub-parser for its kind.

    Args:
        kind: Sub-parser selected by the activity keyword
        event_type: Event label, used as notes for plain events without detail
        details: Detail text following the label

    Returns:
        Extracted duration/quantity/notes
    """
    if kind == DetailKind.BREAST:
        return parse_breast_feeding(details)
    if kind == DetailKind.MILK:
        return parse_milk(details)
    if kind == DetailKind.WEIGHT:
        return parse_weight(details)
    if kind == DetailKind.HEIGHT:
        return parse_height(details)
    if kind == DetailKind.TEMPERATURE:
        return parse_temperature(details)
    return EventDetail(notes=details or event_type)


def parse_event_line(
    line: str, current_date: date, line_number: int, metadata: RecordMetadata
) -> tuple[Record | None, ParseError | None]:
    """
    Convert an ``H:MM label detail`` line into a record.

    Args:
        line: Stripped line text
        current_date: Date inherited from the latest date header
        line_number: 1-based line number for error reporting
        metadata: Import provenance stamped on the record

    Returns:
        (record, None) on success, (None, error) for an unusable event line,
        (None, None) if the line is not an event line at all
    """
    match = EVENT_PATTERN.match(line)
    if not match:
        return None, None

    hour, minute, event_text = int(match.group(1)), int(match.group(2)), match.group(3)
    try:
        clock = time(hour, minute)
    except ValueError:
        return None, ParseError(
            line=line_number,
            message=f"Invalid time: {hour}:{minute:02d}",
            raw_text=line,
        )

    event_type, details = split_event_text(event_text)
    keyword = classify_activity(event_type)
    if keyword is None:
        return None, ParseError(
            line=line_number,
            message=f"Unknown activity type: {event_type}",
            raw_text=line,
        )

    detail = parse_detail(keyword.detail_kind, event_type, details)
    record = Record(
        timestamp=datetime.combine(current_date, clock),
        activity_type=keyword.activity_type,
        duration=detail.duration,
        quantity=detail.quantity,
        notes=detail.notes,
        metadata=metadata,
    )
    return record, None


def scan_line(
    state: ScanState,
    raw_line: str,
    line_number: int,
    metadata: RecordMetadata,
    report_orphan_events: bool = False,
) -> LineOutcome:
    """
    Scan one line of the export.

    Recognizers are tried in order: separator/blank, month header, date line,
    child info, summary/diary text, event line. Unrecognized lines are skipped.

    Args:
        state: Scan state before this line
        raw_line: Line text as read (unstripped)
        line_number: 1-based line number
        metadata: Import provenance for records produced by this line
        report_orphan_events: Report event lines seen before any date header

    Returns:
        LineOutcome with the next state and any record or error produced
    """
    line = raw_line.strip()

    if not line or line == ExportMarkers.SEPARATOR:
        return LineOutcome(state)

    match = HEADER_PATTERN.match(line)
    if match:
        return LineOutcome(
            replace(state, year=int(match.group(1)), month=int(match.group(2)))
        )

    match = DATE_PATTERN.match(line)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            current_date = date(year, month, day)
        except ValueError:
            return LineOutcome(
                replace(state, current_date=None),
                error=ParseError(
                    line=line_number,
                    message=f"Invalid date: {year}/{month}/{day}",
                    raw_text=line,
                ),
            )
        return LineOutcome(replace(state, current_date=current_date))

    if CHILD_INFO_PATTERN.match(line):
        return LineOutcome(state)

    if any(marker in line for marker in ExportMarkers.SUMMARY_MARKERS):
        return LineOutcome(state)

    if state.current_date is None:
        if report_orphan_events and EVENT_PATTERN.match(line):
            return LineOutcome(
                state,
                error=ParseError(
                    line=line_number,
                    message="Event line before any date header",
                    raw_text=line,
                ),
            )
        return LineOutcome(state)

    record, error = parse_event_line(line, state.current_date, line_number, metadata)
    return LineOutcome(state, record=record, error=error)


def parse_text(
    text: str,
    filename: str = ExportMarkers.DEFAULT_FILENAME,
    *,
    imported_at: datetime | None = None,
    report_orphan_events: bool = False,
) -> TextParseResult:
    """
    Parse a Piyolog text export into records and line-level errors.

    Args:
        text: Full export text
        filename: Source identifier stored in each record's metadata
        imported_at: Import timestamp for record metadata (defaults to now)
        report_orphan_events: Report event lines seen before any date header

    Returns:
        TextParseResult with records (without ids), errors and line counts

    Raises:
        ParsingError: If ``text`` is not a string
    """
    if not isinstance(text, str):
        raise ParsingError(f"Export content must be text, got {type(text).__name__}")

    metadata = RecordMetadata(
        imported_at=imported_at or datetime.now(), imported_filename=filename
    )
    lines = text.split("\n")

    state = ScanState()
    records: list[Record] = []
    errors: list[ParseError] = []
    for index, raw_line in enumerate(lines):
        outcome = scan_line(state, raw_line, index + 1, metadata, report_orphan_events)
        state = outcome.state
        if outcome.record is not None:
            records.append(outcome.record)
        if outcome.error is not None:
            errors.append(outcome.error)

    logger.debug(
        f"Parsed {filename}: {len(records)} records, {len(errors)} errors "
        f"from {len(lines)} lines"
    )
    return TextParseResult(
        records=records,
        errors=errors,
        total_lines=len(lines),
        parsed_event_count=len(records),
    )


def format_parse_errors(
    errors: list[ParseError], limit: int = DisplayLimits.MAX_DISPLAYED_ERRORS
) -> str:
    """
    Render parse errors for display, truncated to ``limit`` entries.

    Args:
        errors: Errors returned by the parser
        limit: Maximum number of errors shown verbatim

    Returns:
        Display text, or an empty string when there are no errors
    """
    if not errors:
        return ""

    blocks = []
    for error in errors[:limit]:
        message = f"Line {error.line}: {error.message}"
        if error.raw_text:
            message += f'\n  "{error.raw_text}"'
        blocks.append(message)

    result = "\n\n".join(blocks)
    if len(errors) > limit:
        result += f"\n\n...and {len(errors) - limit} more errors"
    return result


class TextParser:
    """Parser for Piyolog text exports, configured from settings."""

    def __init__(self, settings: Settings):
        """
        Initialize the parser.

        Args:
            settings: Application settings (default filename, orphan policy)
        """
        self.settings = settings

    def parse(self, content: str, filename: str | None = None) -> TextParseResult:
        """Parse export text; see ``parse_text``."""
        return parse_text(
            content,
            filename or self.settings.default_filename,
            report_orphan_events=self.settings.report_orphan_events,
        )

    def format_errors(self, errors: list[ParseError]) -> str:
        """Render errors using the configured display limit."""
        return format_parse_errors(errors, self.settings.max_displayed_errors)

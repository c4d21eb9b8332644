"""
Parser capability shared by the export formats.

Both the text and the CSV parser converge on the same ``Record`` model; the
application layer picks one by file type and treats them interchangeably.
"""

from typing import Protocol, Sequence

from ..models import Record


class ParseOutcomeProtocol(Protocol):
    """What every parse result exposes."""

    records: list[Record]
    errors: Sequence[object]


class ParserProtocol(Protocol):
    """Protocol for export parsers."""

    def parse(
        self, content: str, filename: str | None = None
    ) -> ParseOutcomeProtocol:
        """Parse export content into records and errors."""
        ...

    def format_errors(self, errors: Sequence[object]) -> str:
        """Render the parser's errors for display."""
        ...

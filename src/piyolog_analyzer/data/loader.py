"""
Export file loading.

This module reads Piyolog exports from disk, dispatches them to the parser for
their format and assigns record identifiers on behalf of the application.
"""

import logging
from pathlib import Path

from ..constants import CSVConstants, FileExtensions
from ..exceptions import DataLoadError
from ..models import CsvParseResult, Record, TextParseResult
from ..settings import Settings
from .base import ParserProtocol
from .csv_parser import CsvParser
from .text_parser import TextParser

logger = logging.getLogger(__name__)


def assign_ids(records: list[Record], start: int = 1) -> list[Record]:
    """
    Return copies of ``records`` with sequential integer ids.

    Args:
        records: Records produced by a parser
        start: First id to assign

    Returns:
        New list of records; the inputs are left untouched
    """
    return [
        record.model_copy(update={"id": start + offset})
        for offset, record in enumerate(records)
    ]


class RecordLoader:
    """
    Loads Piyolog export files into records.

    The text and CSV parsers are interchangeable behind ``ParserProtocol``;
    the loader picks one by file suffix.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the loader.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)
        self.text_parser = TextParser(settings)
        self.csv_parser = CsvParser(settings)

    def parser_for(self, path: Path) -> ParserProtocol:
        """Select the parser for a file based on its suffix."""
        if path.suffix.lower() == FileExtensions.CSV:
            return self.csv_parser
        return self.text_parser

    def read_text(self, path: Path) -> str:
        """
        Read an export file as UTF-8 text.

        Raises:
            DataLoadError: If the file is missing or cannot be decoded
        """
        if not path.exists():
            raise DataLoadError(f"Export file not found: {path}")
        try:
            # utf-8-sig tolerates the BOM some phone exports prepend
            return path.read_text(encoding=f"{CSVConstants.DEFAULT_ENCODING}-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise DataLoadError(f"Failed to read export {path}: {e}") from e

    def load(
        self, path: Path, start_id: int = 1
    ) -> TextParseResult | CsvParseResult:
        """
        Load and parse an export file.

        Args:
            path: Path to a ``.txt`` or ``.csv`` export
            start_id: First id assigned to the parsed records

        Returns:
            Parse result whose records carry sequential ids

        Raises:
            DataLoadError: If the file cannot be read
        """
        content = self.read_text(path)
        parser = self.parser_for(path)

        self.logger.info(f"Parsing {path.name} with {type(parser).__name__}")
        result = parser.parse(content, path.name)
        self.logger.info(
            f"Loaded {len(result.records)} records with {len(result.errors)} errors"
        )
        return result.model_copy(
            update={"records": assign_ids(result.records, start_id)}
        )

"""
Custom exceptions for the Piyolog Analyzer package.

Malformed export lines and statistically degenerate input are NOT exceptional:
the parser reports them as ParseError values and the analytics return None or
"no signal" results. The exceptions below cover configuration problems,
I/O failures and caller contract violations.
"""


class PiyologAnalyzerError(Exception):
    """Base exception for all Piyolog Analyzer errors."""


class ConfigurationError(PiyologAnalyzerError):
    """Raised when there is an issue with configuration settings."""


class ValidationError(PiyologAnalyzerError):
    """Raised when a caller passes arguments outside a function's contract."""


class DataLoadError(PiyologAnalyzerError):
    """Raised when there is an error loading export files."""


class ParsingError(PiyologAnalyzerError):
    """Raised on structural parser failures (never for a single bad line)."""


class ProcessingError(PiyologAnalyzerError):
    """Raised when there is an error running an analysis."""


class AnalysisTimeoutError(ProcessingError):
    """Raised when an offloaded analysis does not finish in time."""

"""
Exception types shared by the parser, filter and comparator.
"""

from typing import Optional


PARSING_ERROR = "parsing_error"
DUPLICATE_HEADERS = "duplicate_headers"
INVALID_DATA = "invalid_data"

PARSE_ERROR_KINDS = (PARSING_ERROR, DUPLICATE_HEADERS, INVALID_DATA)


class ReconcileError(Exception):
    """Base class for all csvrecon errors."""
    pass


class ParseError(ReconcileError):
    """
    Raised when delimited text cannot be turned into a table.

    Attributes:
        source_label: File path or label of the offending input
        kind: One of ``parsing_error``, ``duplicate_headers``, ``invalid_data``
        message: Human-readable message, safe to show verbatim
    """

    def __init__(self, source_label: str, kind: str, message: str):
        if kind not in PARSE_ERROR_KINDS:
            raise ValueError(f"Unknown parse error kind: {kind}")
        super().__init__(message)
        self.source_label = source_label
        self.kind = kind
        self.message = message


class InvalidArgumentError(ReconcileError, ValueError):
    """Raised when a filter or comparison is called with bad arguments."""
    pass


class FileReadError(ReconcileError):
    """Raised when an input file cannot be read or converted to text."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

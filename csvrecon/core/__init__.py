"""Core parsing, filtering and comparison logic."""

from .errors import (
    ReconcileError,
    ParseError,
    InvalidArgumentError,
    FileReadError
)
from .parser import Table, parse_csv, detect_delimiter, assign_column_keys
from .row_filter import FilterOptions, filter_empty_rows, filter_rows
from .comparator import (
    ComparisonRow,
    ComparisonSummary,
    ComparisonResult,
    KeyValueComparator,
    compare_rows
)
from .writer import rows_to_csv, comparison_to_csv

__all__ = [
    "ReconcileError",
    "ParseError",
    "InvalidArgumentError",
    "FileReadError",
    "Table",
    "parse_csv",
    "detect_delimiter",
    "assign_column_keys",
    "FilterOptions",
    "filter_empty_rows",
    "filter_rows",
    "ComparisonRow",
    "ComparisonSummary",
    "ComparisonResult",
    "KeyValueComparator",
    "compare_rows",
    "rows_to_csv",
    "comparison_to_csv",
]

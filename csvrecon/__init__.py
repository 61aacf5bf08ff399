"""
csvrecon - CSV reconciliation: filter and key/value comparison of two tables.
"""

__version__ = "1.0.0"

from .core import (
    ReconcileError,
    ParseError,
    InvalidArgumentError,
    FileReadError,
    Table,
    parse_csv,
    FilterOptions,
    filter_empty_rows,
    filter_rows,
    ComparisonRow,
    ComparisonSummary,
    ComparisonResult,
    KeyValueComparator,
    compare_rows,
    rows_to_csv,
    comparison_to_csv
)
from .adapters.file_reader import FileReader, load_table
from .config.manager import ConfigManager, DatasetConfig, JobConfig
from .utils.logger import get_logger

__all__ = [
    "ReconcileError",
    "ParseError",
    "InvalidArgumentError",
    "FileReadError",
    "Table",
    "parse_csv",
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
    "FileReader",
    "load_table",
    "ConfigManager",
    "DatasetConfig",
    "JobConfig",
    "get_logger",
]

"""
Row set filtering.
Single responsibility: drop empty rows and filter left rows by values found in right rows.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Union

from ..utils.logger import get_logger
from ..utils.converters import normalize_value, is_blank
from .errors import InvalidArgumentError


logger = get_logger()

Row = Dict[str, Any]

EXCLUDE = "exclude"
INCLUDE = "include"
FILTER_MODES = (EXCLUDE, INCLUDE)


@dataclass
class FilterOptions:
    """Options for filter_rows."""

    mode: str = EXCLUDE
    case_insensitive: bool = False

    def __post_init__(self):
        """Validate options after initialization."""
        if self.mode not in FILTER_MODES:
            raise InvalidArgumentError(
                f"Unknown filter mode: {self.mode!r} "
                f"(expected one of {', '.join(FILTER_MODES)})"
            )


def is_empty_row(row: Row) -> bool:
    """Return True when every value in the row is null or blank."""
    return all(is_blank(value) for value in row.values())


def filter_empty_rows(rows: List[Row]) -> List[Row]:
    """
    Remove rows whose values are all null or whitespace.

    Args:
        rows: Rows to filter

    Returns:
        New list of copied, non-empty rows in input order
    """
    return [dict(row) for row in rows if not is_empty_row(row)]


def filter_rows(left: List[Row], right: List[Row], column: str,
                mode: Union[str, FilterOptions] = EXCLUDE,
                case_insensitive: bool = False) -> List[Row]:
    """
    Filter left rows by presence of their column value in the right rows.

    Args:
        left: Rows to filter
        right: Reference rows
        column: Column looked up on both sides
        mode: 'exclude' keeps non-matching rows, 'include' keeps matching
            rows. A FilterOptions instance may be passed instead.
        case_insensitive: Compare values ignoring case; must stay False
            when mode is a FilterOptions

    Returns:
        New list of copied left rows. When no right row has the column at
        all, every left row is returned.

    Raises:
        InvalidArgumentError: If column is blank, mode is unknown, or
            case_insensitive is given next to a FilterOptions
    """
    if isinstance(mode, FilterOptions):
        if case_insensitive:
            raise InvalidArgumentError(
                "Pass case_insensitive inside FilterOptions, not alongside it"
            )
        options = mode
    else:
        options = FilterOptions(mode=mode, case_insensitive=case_insensitive)

    if not isinstance(column, str):
        raise InvalidArgumentError("Column name must be a string")
    if not column.strip():
        raise InvalidArgumentError("Cannot filter by empty column name")

    if not any(column in row for row in right):
        logger.debug("row_filter.column_missing",
                    column=column,
                    right_rows=len(right))
        return [dict(row) for row in left]

    right_values = set()
    for row in right:
        value = normalize_value(row.get(column), options.case_insensitive)
        if value is not None:
            right_values.add(value)

    keep_matches = options.mode == INCLUDE
    result = []
    for row in left:
        value = normalize_value(row.get(column), options.case_insensitive)
        matched = value is not None and value in right_values
        if matched == keep_matches:
            result.append(dict(row))

    logger.debug("row_filter.applied",
                column=column,
                mode=options.mode,
                case_insensitive=options.case_insensitive,
                left_rows=len(left),
                kept=len(result))

    return result

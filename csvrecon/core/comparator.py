"""
Core key/value comparison logic.
Single responsibility: match rows of two datasets by key and classify value differences.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..utils.logger import get_logger
from ..utils.converters import normalize_value, to_text
from .errors import InvalidArgumentError


logger = get_logger()

Row = Dict[str, Any]

MATCHED = "matched"
DIFF = "diff"
ONLY_LEFT = "only left"
ONLY_RIGHT = "only right"
STATUSES = (MATCHED, DIFF, ONLY_LEFT, ONLY_RIGHT)


class _NullKey:
    """Map key standing in for null/absent key values."""

    def __repr__(self):
        return "<null key>"


NULL_KEY = _NullKey()


@dataclass
class ComparisonRow:
    """One compared key."""

    key_value: Any
    left_value: Any
    right_value: Any
    status: str

    @property
    def is_difference(self) -> bool:
        return self.status != MATCHED


@dataclass
class ComparisonSummary:
    """Per-status tally of a comparison."""

    total: int = 0
    matched: int = 0
    diff: int = 0
    only_left: int = 0
    only_right: int = 0

    @property
    def match_rate(self) -> float:
        """Matched keys as a percentage of all keys."""
        if self.total == 0:
            return 0.0
        return round(self.matched / self.total * 100, 2)

    def count(self, status: str):
        if status == MATCHED:
            self.matched += 1
        elif status == DIFF:
            self.diff += 1
        elif status == ONLY_LEFT:
            self.only_left += 1
        elif status == ONLY_RIGHT:
            self.only_right += 1
        else:
            raise ValueError(f"Unknown comparison status: {status}")
        self.total += 1


@dataclass
class ComparisonResult:
    """Results from key/value comparison."""

    key_column_name: str
    value_column_name: str
    rows: List[ComparisonRow] = field(default_factory=list)
    summary: ComparisonSummary = field(default_factory=ComparisonSummary)

    def differences(self) -> List[ComparisonRow]:
        """Rows whose status is anything but matched."""
        return [row for row in self.rows if row.is_difference]

    def by_status(self, status: str) -> List[ComparisonRow]:
        return [row for row in self.rows if row.status == status]


class KeyValueComparator:
    """
    Compare two row collections VLOOKUP-style.

    Rows are matched on a key column; the value column of matched keys is
    compared as trimmed text.
    """

    def __init__(self, case_insensitive: bool = False):
        """
        Initialize comparator.

        Args:
            case_insensitive: Match keys ignoring case
        """
        self.case_insensitive = case_insensitive

    def _normalize_key(self, value: Any):
        normalized = normalize_value(value, self.case_insensitive)
        return NULL_KEY if normalized is None else normalized

    def _build_map(self, rows: List[Row], key_column: str,
                   value_column: str) -> Dict[Any, Tuple[Any, Any]]:
        """
        Index rows by normalized key.

        Later rows overwrite earlier rows with the same key.

        Returns:
            Normalized key -> (original key value, value) mapping
        """
        entries = {}
        for row in rows:
            key_value = row.get(key_column)
            entries[self._normalize_key(key_value)] = (key_value, row.get(value_column))
        return entries

    @staticmethod
    def _validate_column(name: str, label: str):
        if not isinstance(name, str):
            raise InvalidArgumentError(f"{label} column name must be a string")
        if not name.strip():
            raise InvalidArgumentError(f"{label} column name cannot be empty")

    def compare(self, left: List[Row], right: List[Row],
                key_column: str, value_column: str) -> ComparisonResult:
        """
        Compare two datasets.

        Args:
            left: Left rows
            right: Right rows
            key_column: Column used to match rows
            value_column: Column whose values are compared

        Returns:
            Comparison results, one row per distinct key, left keys first

        Raises:
            InvalidArgumentError: If a column name is blank
        """
        self._validate_column(key_column, "Key")
        self._validate_column(value_column, "Value")

        logger.debug("comparator.starting",
                    key=key_column,
                    value=value_column,
                    left_rows=len(left),
                    right_rows=len(right),
                    case_insensitive=self.case_insensitive)

        left_map = self._build_map(left, key_column, value_column)
        right_map = self._build_map(right, key_column, value_column)

        result = ComparisonResult(key_column_name=key_column,
                                  value_column_name=value_column)

        all_keys = list(left_map)
        all_keys.extend(key for key in right_map if key not in left_map)

        for key in all_keys:
            left_entry = left_map.get(key)
            right_entry = right_map.get(key)

            if right_entry is None:
                status = ONLY_LEFT
            elif left_entry is None:
                status = ONLY_RIGHT
            elif to_text(left_entry[1]).strip() == to_text(right_entry[1]).strip():
                status = MATCHED
            else:
                status = DIFF

            key_value = None
            if left_entry is not None and left_entry[0] is not None:
                key_value = left_entry[0]
            elif right_entry is not None:
                key_value = right_entry[0]

            result.rows.append(ComparisonRow(
                key_value=key_value,
                left_value=left_entry[1] if left_entry is not None else None,
                right_value=right_entry[1] if right_entry is not None else None,
                status=status
            ))
            result.summary.count(status)

        logger.debug("comparator.completed",
                    total=result.summary.total,
                    matched=result.summary.matched,
                    diff=result.summary.diff,
                    only_left=result.summary.only_left,
                    only_right=result.summary.only_right)

        return result


def compare_rows(left: List[Row], right: List[Row], key_column: str,
                 value_column: str, case_insensitive: bool = False) -> ComparisonResult:
    """Compare two row collections by key; see KeyValueComparator.compare."""
    return KeyValueComparator(case_insensitive).compare(
        left, right, key_column, value_column
    )

"""
CSV serialization.
Single responsibility: write rows and comparison results back to CSV text.
"""

import csv
import io
from typing import Any, Dict, List, Optional

from ..utils.converters import to_text
from .comparator import ComparisonResult


Row = Dict[str, Any]

LINE_TERMINATOR = "\r\n"


def collect_headers(rows: List[Row]) -> List[str]:
    """Union of row keys in first-seen order."""
    headers = {}
    for row in rows:
        for key in row:
            headers.setdefault(key, None)
    return list(headers)


def _write(header: List[str], records: List[List[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer,
                        delimiter=",",
                        quotechar='"',
                        quoting=csv.QUOTE_MINIMAL,
                        lineterminator=LINE_TERMINATOR)
    writer.writerow(header)
    for record in records:
        writer.writerow([to_text(value) for value in record])

    # No terminator after the last record
    text = buffer.getvalue()
    return text[:-len(LINE_TERMINATOR)] if text.endswith(LINE_TERMINATOR) else text


def rows_to_csv(rows: List[Row], headers: Optional[List[str]] = None) -> str:
    """
    Serialize rows to CSV text.

    Fields containing the delimiter, a quote or a line break are quoted
    with embedded quotes doubled. Null and missing values are written as
    empty fields.

    Args:
        rows: Rows to write
        headers: Column order; defaults to the union of row keys

    Returns:
        CSV text with a header line
    """
    if headers is None:
        headers = collect_headers(rows)

    records = [[row.get(header) for header in headers] for row in rows]
    return _write(headers, records)


def comparison_to_csv(result: ComparisonResult,
                      only_differences: bool = False) -> str:
    """
    Serialize a comparison result to CSV text.

    Args:
        result: Comparison to export
        only_differences: Skip matched keys

    Returns:
        CSV text with key, left value, right value and status columns
    """
    value_column = result.value_column_name
    header = [
        result.key_column_name,
        f"Left {value_column}",
        f"Right {value_column}",
        "Status"
    ]

    rows = result.differences() if only_differences else result.rows
    records = [[row.key_value, row.left_value, row.right_value, row.status]
               for row in rows]
    return _write(header, records)

"""
Delimited-text parsing.
Single responsibility: turn raw CSV text into headers and row mappings.
"""

import csv
import io
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from ..utils.logger import get_logger
from ..utils.converters import is_blank
from .errors import ParseError, PARSING_ERROR, DUPLICATE_HEADERS
from .row_filter import filter_empty_rows


logger = get_logger()

Row = Dict[str, Any]

BOM = "\ufeff"
QUOTE = '"'
DEFAULT_DELIMITER = ","
CANDIDATE_DELIMITERS = (",", "\t", "|", ";")
SINGLE_COLUMN_DELIMITER = "\t"
PREVIEW_RECORDS = 10
AUTO_DETECT_FAILED = "Unable to auto-detect delimiting character; defaulted to ','"


@dataclass
class Table:
    """Parsed delimited text: header names plus one mapping per data row."""

    headers: List[str] = field(default_factory=list)
    data: List[Row] = field(default_factory=list)

    @property
    def column_keys(self) -> List[str]:
        """Row mapping key used for each header, in header order."""
        return assign_column_keys(self.headers)

    def __len__(self) -> int:
        return len(self.data)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert the table to a DataFrame.

        Returns:
            DataFrame with one column per row key, in header order
        """
        return pd.DataFrame(self.data, columns=self.column_keys, dtype=object)


def _is_blank_record(record: List[str]) -> bool:
    return all(is_blank(value) for value in record)


def _raise_field_size_limit():
    # Cells are bounded by memory only; the csv module defaults to 128 KB
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return
        except OverflowError:
            limit //= 10


_raise_field_size_limit()


def _reader(text: str, delimiter: str, strict: bool):
    return csv.reader(
        io.StringIO(text, newline=""),
        delimiter=delimiter,
        quotechar=QUOTE,
        doublequote=True,
        strict=strict
    )


def _preview_field_counts(text: str, delimiter: str,
                          limit: int = PREVIEW_RECORDS) -> List[int]:
    counts = []
    reader = _reader(text, delimiter, strict=False)
    try:
        for record in reader:
            if _is_blank_record(record):
                continue
            counts.append(len(record))
            if len(counts) >= limit:
                break
    except csv.Error:
        # Malformed input is reported by the strict pass
        pass
    return counts


def detect_delimiter(text: str) -> str:
    """
    Guess the field delimiter of a CSV text.

    Text without any candidate delimiter is treated as single-column.
    Otherwise the candidate giving the most consistent field count over
    the first records wins, provided it splits records into at least two
    fields on average.

    Args:
        text: CSV text without BOM

    Returns:
        Delimiter character
    """
    if not any(delim in text for delim in CANDIDATE_DELIMITERS):
        return SINGLE_COLUMN_DELIMITER

    best = None
    for delim in CANDIDATE_DELIMITERS:
        counts = _preview_field_counts(text, delim)
        if not counts:
            continue

        average = sum(counts) / len(counts)
        if average < 2:
            continue

        delta = sum(abs(b - a) for a, b in zip(counts, counts[1:]))
        score = (delta, -average)
        if best is None or score < best[0]:
            best = (score, delim)

    return best[1] if best else DEFAULT_DELIMITER


def tokenize(text: str, delimiter: str, source_label: str) -> List[List[str]]:
    """
    Split CSV text into records of fields.

    Args:
        text: CSV text
        delimiter: Field delimiter
        source_label: Label used in error messages

    Returns:
        All records, blank ones included

    Raises:
        ParseError: If the text has malformed quoting
    """
    reader = _reader(text, delimiter, strict=True)
    records = []
    errors = []

    while True:
        try:
            record = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            errors.append(f"{e} (line {reader.line_num})")
            continue
        records.append(record)

    if errors:
        logger.error("parser.tokenize.failed",
                    source=source_label,
                    errors=len(errors))
        raise ParseError(
            source_label,
            PARSING_ERROR,
            f"CSV parsing errors found in {source_label}: {', '.join(errors)}"
        )

    return records


def normalize_header(header: str) -> str:
    """Strip one pair of double quotes wrapping a header cell."""
    if len(header) >= 2 and header.startswith(QUOTE) and header.endswith(QUOTE):
        return header[1:-1]
    return header


def find_duplicate_headers(headers: List[str]) -> List[str]:
    """
    List non-empty header names that occur more than once.

    Comparison is exact: case and surrounding whitespace matter.

    Returns:
        Unique duplicated names in the order their repeats appear
    """
    seen = set()
    duplicates = []
    for header in headers:
        if not header:
            continue
        if header in seen and header not in duplicates:
            duplicates.append(header)
        seen.add(header)
    return duplicates


def assign_column_keys(headers: List[str]) -> List[str]:
    """
    Work out the row mapping key for every header.

    Non-empty headers are their own key. The first empty header maps to
    ``""`` and later ones to ``col_N`` (N is the 1-based position). A lone
    empty header in the last column maps to ``col_N`` as well.

    Args:
        headers: Normalized header names

    Returns:
        One key per header
    """
    empty_count = sum(1 for header in headers if not header)
    last_index = len(headers) - 1

    keys = []
    seen_empty = False
    for index, header in enumerate(headers):
        if header:
            keys.append(header)
            continue

        positional = f"col_{index + 1}"
        if empty_count == 1 and index == last_index:
            keys.append(positional)
        elif not seen_empty:
            keys.append("")
        else:
            keys.append(positional)
        seen_empty = True

    return keys


def _build_row(keys: List[str], record: List[str]) -> Row:
    row = {}
    for index, key in enumerate(keys):
        row[key] = record[index] if index < len(record) else ""
    return row


def parse_csv(raw_text: str, source_label: str,
              delimiter: Optional[str] = None) -> Table:
    """
    Parse CSV text into a Table.

    Leading BOM is dropped, blank records are skipped (so leading blank
    lines never become the header), and rows that end up empty are
    removed.

    Args:
        raw_text: Complete file content
        source_label: File path or label, used in error messages
        delimiter: Field delimiter; detected when omitted

    Returns:
        Parsed table. Input with no non-blank record gives an empty table.

    Raises:
        ParseError: On empty input, malformed quoting or duplicate headers
    """
    text = raw_text[1:] if raw_text.startswith(BOM) else raw_text

    if not text.strip():
        logger.error("parser.empty_input", source=source_label)
        raise ParseError(
            source_label,
            PARSING_ERROR,
            f"Failed to parse CSV file {source_label}: {AUTO_DETECT_FAILED}"
        )

    if delimiter is None:
        delimiter = detect_delimiter(text)

    records = [r for r in tokenize(text, delimiter, source_label)
               if not _is_blank_record(r)]

    if not records:
        logger.debug("parser.no_records", source=source_label)
        return Table(headers=[], data=[])

    headers = [normalize_header(cell) for cell in records[0]]

    duplicates = find_duplicate_headers(headers)
    if duplicates:
        logger.error("parser.duplicate_headers",
                    source=source_label,
                    duplicates=duplicates)
        raise ParseError(
            source_label,
            DUPLICATE_HEADERS,
            f"CSV file {source_label} contains duplicate column names: "
            f"{', '.join(duplicates)}. Please fix the file and try again."
        )

    keys = assign_column_keys(headers)
    rows = filter_empty_rows([_build_row(keys, record) for record in records[1:]])

    logger.debug("parser.parsed",
                source=source_label,
                delimiter=repr(delimiter),
                columns=len(headers),
                rows=len(rows))

    return Table(headers=headers, data=rows)

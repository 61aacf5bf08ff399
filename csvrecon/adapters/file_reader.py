"""
File reader for CSV and single-sheet Excel inputs.
Single responsibility: read an input file into CSV text the parser can consume.
"""

from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ..utils.logger import get_logger
from ..core.errors import FileReadError
from ..core.parser import Table, parse_csv


logger = get_logger()

EXCEL_SUFFIXES = (".xlsx", ".xls")
ENCODINGS = ("utf-8-sig", "utf-8", "cp1252", "latin-1")


class FileReader:
    """
    Reads input files as CSV text.
    """

    def __init__(self, encodings=ENCODINGS):
        """
        Initialize file reader.

        Args:
            encodings: Text encodings tried in order for CSV files
        """
        self.encodings = tuple(encodings)

    def read_csv_text(self, file_path: Path) -> str:
        """
        Read a text file, trying each configured encoding.

        Args:
            file_path: Path to CSV file

        Returns:
            Decoded file content

        Raises:
            FileReadError: If no encoding can decode the file
        """
        logger.info("file_reader.csv.reading", file=str(file_path))

        raw = file_path.read_bytes()

        for encoding in self.encodings:
            try:
                content = raw.decode(encoding)
            except UnicodeDecodeError:
                continue

            logger.info("file_reader.csv.loaded",
                       file=str(file_path),
                       size=len(raw),
                       encoding=encoding)
            return content

        logger.error("file_reader.csv.undecodable", file=str(file_path))
        raise FileReadError(
            f"Could not decode {file_path} with any of: {', '.join(self.encodings)}",
            str(file_path)
        )

    def read_excel_text(self, file_path: Path) -> str:
        """
        Convert the only sheet of an Excel workbook to CSV text.

        Args:
            file_path: Path to Excel file

        Returns:
            CSV text of the sheet, every cell as text

        Raises:
            FileReadError: If the workbook cannot be read or does not have
                exactly one sheet
        """
        logger.info("file_reader.excel.reading", file=str(file_path))

        try:
            with pd.ExcelFile(file_path) as workbook:
                sheet_names = workbook.sheet_names
                if len(sheet_names) != 1:
                    raise FileReadError(
                        f"Excel file must contain exactly one sheet. This file has "
                        f"{len(sheet_names)} sheets: {', '.join(sheet_names)}. "
                        f"Please ensure only one worksheet exists (visible or hidden) "
                        f"and try again.",
                        str(file_path)
                    )

                df = workbook.parse(sheet_names[0], header=None, dtype=str,
                                    keep_default_na=False)
        except FileReadError:
            logger.error("file_reader.excel.sheet_count", file=str(file_path))
            raise
        except Exception as e:
            logger.error("file_reader.excel.failed",
                        file=str(file_path),
                        error=str(e))
            raise FileReadError(f"Failed to read Excel file: {e}", str(file_path)) from e

        logger.info("file_reader.excel.loaded",
                   sheet=sheet_names[0],
                   rows=len(df),
                   columns=len(df.columns))

        return df.to_csv(index=False, header=False, lineterminator="\n")

    def read_text(self, file_path: Union[str, Path]) -> str:
        """
        Read any supported file as CSV text.

        Args:
            file_path: Path to file

        Returns:
            CSV text

        Raises:
            FileReadError: If the file is missing or unreadable
        """
        file_path = Path(file_path)

        if not file_path.is_file():
            logger.error("file_reader.missing", file=str(file_path))
            raise FileReadError(f"File not found: {file_path}", str(file_path))

        if file_path.suffix.lower() in EXCEL_SUFFIXES:
            return self.read_excel_text(file_path)
        return self.read_csv_text(file_path)

    def load_table(self, file_path: Union[str, Path],
                   delimiter: Optional[str] = None) -> Table:
        """
        Read and parse a file.

        Args:
            file_path: Path to file
            delimiter: Field delimiter; detected when omitted

        Returns:
            Parsed table
        """
        content = self.read_text(file_path)

        # Sheets are always converted with commas
        if delimiter is None and Path(file_path).suffix.lower() in EXCEL_SUFFIXES:
            delimiter = ","

        table = parse_csv(content, str(file_path), delimiter=delimiter)

        logger.info("file_reader.table.parsed",
                   file=str(file_path),
                   columns=len(table.headers),
                   rows=len(table.data))

        return table


def load_table(file_path: Union[str, Path], delimiter: Optional[str] = None) -> Table:
    """Read and parse a file with the default reader."""
    return FileReader().load_table(file_path, delimiter=delimiter)

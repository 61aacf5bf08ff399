#!/usr/bin/env python3
"""
csvrecon - Main Entry Point
Filter or compare two CSV/Excel tables from the command line.
"""

import argparse
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from csvrecon import (
    __version__,
    ConfigManager,
    FileReader,
    ReconcileError,
    InvalidArgumentError,
    ParseError,
    Table,
    filter_rows,
    compare_rows,
    rows_to_csv,
    comparison_to_csv,
    get_logger
)
from csvrecon.config.manager import JobConfig, create_sample_config
from csvrecon.core.errors import INVALID_DATA
from csvrecon.ui.display import ResultDisplay, ITEMS_PER_PAGE
from csvrecon.utils.logger import configure_logging


logger = get_logger()

SAMPLE_CONFIG_NAME = "csvrecon_sample.yaml"


def require_rows(table: Table, label: str):
    """
    Fail when a table that must be filtered or compared has no rows.

    Raises:
        ParseError: kind ``invalid_data``
    """
    if not table.data:
        raise ParseError(label, INVALID_DATA, f"No data found in CSV file: {label}")


def write_output(content: str, output: Path):
    """Write CSV text, creating parent folders."""
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    logger.info("output.written", file=str(output), size=len(content))


def run_filter(left: Table, right: Table, column: str, mode: str = "exclude",
               case_insensitive: bool = False, right_label: str = "right") -> List[dict]:
    """
    Filter left rows by a column picked from the right table's headers.

    A right table without headers filters nothing.

    Raises:
        InvalidArgumentError: If the column is blank or not a right header
    """
    if column.strip() and right.headers and column not in right.column_keys:
        available = ", ".join(repr(key) for key in right.column_keys)
        raise InvalidArgumentError(
            f"Column {column!r} not found in {right_label}. Available columns: {available}"
        )

    return filter_rows(left.data, right.data, column,
                       mode=mode, case_insensitive=case_insensitive)


class ReconcilePipeline:
    """
    Runs the jobs of a configuration file.
    """

    def __init__(self, config_file: Path,
                 display: Optional[ResultDisplay] = None,
                 page_size: int = ITEMS_PER_PAGE):
        """
        Initialize pipeline.

        Args:
            config_file: Path to configuration file
            display: Terminal renderer
            page_size: Result rows shown per job
        """
        self.config_file = Path(config_file)
        self.display = display or ResultDisplay()
        self.page_size = page_size

        self.config_manager = ConfigManager(self.config_file)
        self.reader = FileReader()
        self.tables = {}

    def _load(self, name: str) -> Table:
        if name not in self.tables:
            dataset = self.config_manager.get_dataset(name)
            path = self.config_manager.resolve_path(dataset)
            self.tables[name] = self.reader.load_table(path, delimiter=dataset.delimiter)
        return self.tables[name]

    def _output_path(self, job: JobConfig) -> Optional[Path]:
        if not job.output:
            return None
        path = Path(job.output)
        return path if path.is_absolute() else self.config_file.parent / path

    def run_job(self, job: JobConfig):
        """
        Run one job.

        Args:
            job: Job configuration
        """
        logger.info("pipeline.job.starting",
                   job=job.name,
                   operation=job.operation,
                   left=job.left_dataset,
                   right=job.right_dataset)

        left = self._load(job.left_dataset)
        right = self._load(job.right_dataset)
        require_rows(left, job.left_dataset)

        output = self._output_path(job)

        if job.operation == "filter":
            filtered = run_filter(left, right, job.column, job.mode,
                                  job.case_insensitive, job.right_dataset)
            self.display.show_filter_summary(len(filtered), len(left.data),
                                             job.column, job.mode)
            if output:
                write_output(rows_to_csv(filtered, left.column_keys), output)
        else:
            result = compare_rows(left.data, right.data, job.key_column,
                                  job.value_column, job.case_insensitive)
            self.display.show_comparison_summary(result)
            self.display.show_comparison_rows(result, page_size=self.page_size,
                                              only_differences=job.only_differences)
            if output:
                write_output(comparison_to_csv(result, job.only_differences), output)

        logger.info("pipeline.job.completed", job=job.name)

    def run(self) -> bool:
        """
        Run every configured job.

        Returns:
            True if successful, False otherwise
        """
        try:
            logger.info("pipeline.starting", config=str(self.config_file))

            self.config_manager.load()

            if not self.config_manager.jobs:
                logger.warning("pipeline.no_jobs")

            for job in self.config_manager.jobs:
                self.run_job(job)

            logger.info("pipeline.completed")
            return True

        except (ReconcileError, ValueError, KeyError, FileNotFoundError) as e:
            logger.error("pipeline.failed",
                        error=str(e),
                        traceback=traceback.format_exc())
            self.display.log_error(f"Pipeline failed: {e}")
            return False


def cmd_filter(args, display: ResultDisplay) -> int:
    reader = FileReader()
    left = reader.load_table(args.left, delimiter=args.delimiter)
    right = reader.load_table(args.right, delimiter=args.delimiter)
    require_rows(left, args.left)

    filtered = run_filter(left, right, args.column, args.mode,
                          args.ignore_case, args.right)

    display.show_filter_summary(len(filtered), len(left.data), args.column, args.mode)
    display.show_table(Table(headers=left.headers, data=filtered),
                       "Filtered rows", page=args.page, page_size=args.page_size)

    if args.output:
        write_output(rows_to_csv(filtered, left.column_keys), args.output)
        display.log_success(f"Exported {len(filtered):,} rows to {args.output}")
    return 0


def cmd_compare(args, display: ResultDisplay) -> int:
    reader = FileReader()
    left = reader.load_table(args.left, delimiter=args.delimiter)
    right = reader.load_table(args.right, delimiter=args.delimiter)
    require_rows(left, args.left)

    result = compare_rows(left.data, right.data, args.key,
                          args.value, args.ignore_case)

    display.show_comparison_summary(result)
    display.show_comparison_rows(result, page=args.page, page_size=args.page_size,
                                 only_differences=args.only_differences)

    if args.output:
        write_output(comparison_to_csv(result, args.only_differences), args.output)
        display.log_success(f"Exported comparison to {args.output}")
    return 0


def cmd_preview(args, display: ResultDisplay) -> int:
    table = FileReader().load_table(args.file, delimiter=args.delimiter)
    display.show_table(table, str(args.file), page=args.page, page_size=args.page_size)
    return 0


def cmd_run(args, display: ResultDisplay) -> int:
    config_path = Path(args.config)
    if not config_path.exists():
        display.log_error(f"Configuration file not found: {config_path}")
        display.console.print("Use --create-sample to create a sample configuration")
        return 1

    pipeline = ReconcilePipeline(config_path, display=display, page_size=args.page_size)
    return 0 if pipeline.run() else 1


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="csvrecon",
        description="Filter or compare two CSV/Excel tables"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--log-file",
        help="Append JSON log entries to this file"
    )
    parser.add_argument(
        "--create-sample",
        action="store_true",
        help=f"Create sample configuration file ({SAMPLE_CONFIG_NAME})"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"csvrecon v{__version__}"
    )

    paging = argparse.ArgumentParser(add_help=False)
    paging.add_argument("--page", type=int, default=1, help="Result page to show")
    paging.add_argument("--page-size", type=int, default=ITEMS_PER_PAGE,
                        help=f"Rows per page (default: {ITEMS_PER_PAGE})")

    inputs = argparse.ArgumentParser(add_help=False)
    inputs.add_argument("left", help="Left (source) CSV or Excel file")
    inputs.add_argument("right", help="Right (reference) CSV or Excel file")
    inputs.add_argument("--delimiter", help="Field delimiter (default: detect)")
    inputs.add_argument("--ignore-case", "-i", action="store_true",
                        help="Match values ignoring case")
    inputs.add_argument("--output", "-o", help="Write the result as CSV")

    commands = parser.add_subparsers(dest="command")

    filter_cmd = commands.add_parser(
        "filter", parents=[inputs, paging],
        help="Keep or drop left rows whose column value appears in the right file"
    )
    filter_cmd.add_argument("--column", "-c", required=True,
                            help="Column of the right file to filter by")
    filter_cmd.add_argument("--mode", choices=["exclude", "include"], default="exclude",
                            help="exclude matching rows (default) or keep only them")
    filter_cmd.set_defaults(handler=cmd_filter)

    compare_cmd = commands.add_parser(
        "compare", parents=[inputs, paging],
        help="Match rows by key and compare a value column"
    )
    compare_cmd.add_argument("--key", "-k", required=True, help="Key column")
    compare_cmd.add_argument("--value", "-V", required=True, help="Value column")
    compare_cmd.add_argument("--only-differences", action="store_true",
                             help="Hide matched keys")
    compare_cmd.set_defaults(handler=cmd_compare)

    preview_cmd = commands.add_parser("preview", parents=[paging],
                                      help="Show a page of a parsed file")
    preview_cmd.add_argument("file", help="CSV or Excel file")
    preview_cmd.add_argument("--delimiter", help="Field delimiter (default: detect)")
    preview_cmd.set_defaults(handler=cmd_preview)

    run_cmd = commands.add_parser("run", help="Run the jobs of a configuration file")
    run_cmd.add_argument("config", nargs="?", default="csvrecon.yaml",
                         help="Configuration file (default: csvrecon.yaml)")
    run_cmd.add_argument("--page-size", type=int, default=ITEMS_PER_PAGE,
                         help=f"Result rows shown per job (default: {ITEMS_PER_PAGE})")
    run_cmd.set_defaults(handler=cmd_run)

    return parser


def main(argv: Optional[List[str]] = None,
         display: Optional[ResultDisplay] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else "WARN", args.log_file)
    display = display or ResultDisplay()

    if args.create_sample:
        create_sample_config(Path(SAMPLE_CONFIG_NAME))
        display.log_success(f"Sample configuration created: {SAMPLE_CONFIG_NAME}")
        return 0

    if not getattr(args, "handler", None):
        parser.print_help()
        return 1

    try:
        return args.handler(args, display)
    except ReconcileError as e:
        logger.error("cli.failed", command=args.command, error=str(e))
        display.log_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())

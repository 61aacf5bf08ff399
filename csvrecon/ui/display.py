"""
Terminal display of tables and results.
Single responsibility: render parsed tables, filter outcomes and comparisons with Rich.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table as RichTable
from rich.panel import Panel
from rich.text import Text
from rich.markup import escape
from rich import box

from ..core.parser import Table
from ..core.comparator import ComparisonResult, MATCHED, DIFF, ONLY_LEFT, ONLY_RIGHT
from ..utils.converters import to_text


ITEMS_PER_PAGE = 10

STATUS_STYLES = {
    MATCHED: "green",
    DIFF: "yellow",
    ONLY_LEFT: "cyan",
    ONLY_RIGHT: "magenta",
}


def display_header(header: str, index: int) -> str:
    """Header label for display; blank headers show their position."""
    if not header.strip():
        return f"(Empty column {index + 1})"
    return header


def paginate(items: List[Any], page: int,
             page_size: int = ITEMS_PER_PAGE) -> Tuple[List[Any], int, int]:
    """
    Slice one page out of a list.

    Args:
        items: All items
        page: 1-based page number, clamped to the valid range
        page_size: Items per page

    Returns:
        (page items, clamped page number, total pages)
    """
    if page_size < 1:
        raise ValueError("Page size must be at least 1")

    total_pages = max(1, math.ceil(len(items) / page_size))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size
    return items[start:start + page_size], page, total_pages


class ResultDisplay:
    """
    Render csvrecon objects to the terminal.
    """

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize display.

        Args:
            console: Rich console; a new one is created when omitted
        """
        self.console = console or Console()

    def _page_caption(self, page: int, total_pages: int, shown: int,
                      start: int, total: int) -> str:
        if total == 0:
            return "No rows"
        caption = f"Showing {start + 1}-{start + shown} of {total:,} rows"
        if total_pages > 1:
            caption += f" (page {page}/{total_pages})"
        return caption

    def show_table(self, table: Table, title: str, page: int = 1,
                   page_size: int = ITEMS_PER_PAGE):
        """
        Display one page of a parsed table.

        Args:
            table: Parsed table
            title: Table title
            page: 1-based page number
            page_size: Rows per page
        """
        if not table.data:
            self.console.print(Panel(Text("No data loaded", justify="center"),
                                     title=title, expand=False))
            return

        rows, page, total_pages = paginate(table.data, page, page_size)
        start = (page - 1) * page_size

        grid = RichTable(title=escape(title), box=box.SIMPLE_HEAVY)
        for index, header in enumerate(table.headers):
            grid.add_column(escape(display_header(header, index)), overflow="fold")

        keys = table.column_keys
        for row in rows:
            grid.add_row(*[escape(to_text(row.get(key))) for key in keys])

        self.console.print(grid)
        self.console.print(self._page_caption(page, total_pages, len(rows),
                                              start, len(table.data)), style="dim")

    def show_filter_summary(self, kept: int, total: int, column: str, mode: str):
        """
        Display the outcome of a filter run.

        Args:
            kept: Rows in the filtered output
            total: Rows in the left input
            column: Filter column
            mode: 'include' or 'exclude'
        """
        column = escape(column)
        if mode == "include":
            description = f'Rows from left CSV whose "{column}" value appears in right CSV'
        else:
            description = f'Rows from left CSV excluding those that match "{column}" in right CSV'

        summary = RichTable(title="Filtered Results", box=box.ROUNDED)
        summary.add_column("Metric", style="cyan", no_wrap=True)
        summary.add_column("Value", style="magenta")
        summary.add_row("Left rows", f"{total:,}")
        summary.add_row("Kept rows", f"{kept:,}")
        summary.add_row("Removed rows", f"{total - kept:,}")

        self.console.print()
        self.console.print(summary)
        self.console.print(description, style="dim")
        self.console.print()

    def show_comparison_summary(self, result: ComparisonResult):
        """
        Display comparison counts in a formatted table.

        Args:
            result: Comparison results
        """
        summary = result.summary
        table = RichTable(
            title=escape(f"Comparison: {result.key_column_name} -> {result.value_column_name}"),
            box=box.ROUNDED
        )

        table.add_column("Metric", style="cyan", no_wrap=True)
        table.add_column("Value", style="magenta")
        table.add_column("Percentage", style="green")

        metrics = [
            ("Matched", summary.matched),
            ("Different", summary.diff),
            ("Only in Left", summary.only_left),
            ("Only in Right", summary.only_right),
        ]

        for metric, value in metrics:
            percentage = (100 * value / summary.total) if summary.total else 0
            table.add_row(metric, f"{value:,}", f"{percentage:.1f}%")
        table.add_row("Total keys", f"{summary.total:,}", "-")

        self.console.print()
        self.console.print(table)
        self.console.print()

    def show_comparison_rows(self, result: ComparisonResult, page: int = 1,
                             page_size: int = ITEMS_PER_PAGE,
                             only_differences: bool = False):
        """
        Display one page of comparison rows.

        Args:
            result: Comparison results
            page: 1-based page number
            page_size: Rows per page
            only_differences: Hide matched keys
        """
        rows = result.differences() if only_differences else result.rows
        page_rows, page, total_pages = paginate(rows, page, page_size)
        start = (page - 1) * page_size

        table = RichTable(box=box.SIMPLE)
        table.add_column(escape(result.key_column_name), style="bold")
        table.add_column(escape(f"Left {result.value_column_name}"))
        table.add_column(escape(f"Right {result.value_column_name}"))
        table.add_column("Status")

        for row in page_rows:
            table.add_row(
                escape(to_text(row.key_value)),
                escape(to_text(row.left_value)),
                escape(to_text(row.right_value)),
                Text(row.status, style=STATUS_STYLES.get(row.status, ""))
            )

        self.console.print(table)
        self.console.print(self._page_caption(page, total_pages, len(page_rows),
                                              start, len(rows)), style="dim")

    def log_error(self, message: str, details: Optional[Dict] = None):
        """
        Display error message.

        Args:
            message: Error message
            details: Additional error details
        """
        error_text = Text(f"✗ {message}", style="bold red")

        if details:
            self.console.print(Panel(error_text, title="Error",
                                     border_style="red", expand=False))
            for key, value in details.items():
                self.console.print(f"  {key}: {value}", style="dim")
        else:
            self.console.print(error_text)

    def log_success(self, message: str):
        """Display success message."""
        self.console.print(f"✓ {message}", style="green")

"""
Unit tests for terminal rendering helpers.
"""

import io
import pytest
from pathlib import Path
import sys

from rich.console import Console

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from csvrecon.ui.display import ResultDisplay, display_header, paginate
from csvrecon.core.comparator import compare_rows
from csvrecon.core.parser import Table, parse_csv


def make_display():
    buffer = io.StringIO()
    return ResultDisplay(Console(file=buffer, width=200)), buffer


class TestHelpers:
    """Header labels and paging."""

    def test_display_header(self):
        assert display_header("name", 0) == "name"
        assert display_header("", 2) == "(Empty column 3)"
        assert display_header("  ", 0) == "(Empty column 1)"

    def test_paginate_first_page(self):
        items, page, total = paginate(list(range(25)), 1, 10)

        assert items == list(range(10))
        assert (page, total) == (1, 3)

    def test_paginate_last_partial_page(self):
        items, page, total = paginate(list(range(25)), 3, 10)

        assert items == [20, 21, 22, 23, 24]
        assert page == 3

    @pytest.mark.parametrize("requested, expected", [(0, 1), (-4, 1), (99, 3)])
    def test_paginate_clamps_page(self, requested, expected):
        _, page, _ = paginate(list(range(25)), requested, 10)

        assert page == expected

    def test_paginate_empty(self):
        assert paginate([], 1) == ([], 1, 1)

    def test_paginate_rejects_bad_page_size(self):
        with pytest.raises(ValueError, match="Page size"):
            paginate([1], 1, 0)


class TestResultDisplay:
    """Rendered output."""

    def test_show_table(self):
        display, buffer = make_display()
        table = parse_csv("name,,city\nAlice,x,[bold]NY", "people.csv")

        display.show_table(table, "people.csv")

        output = buffer.getvalue()
        assert "(Empty column 2)" in output
        assert "Alice" in output
        assert "[bold]NY" in output
        assert "Showing 1-1 of 1 rows" in output

    def test_show_empty_table(self):
        display, buffer = make_display()

        display.show_table(Table([], []), "empty.csv")

        assert "No data loaded" in buffer.getvalue()

    def test_show_table_second_page(self):
        display, buffer = make_display()
        text = "n\n" + "\n".join(str(i) for i in range(1, 16))

        display.show_table(parse_csv(text, "n.csv"), "n.csv", page=2, page_size=10)

        assert "Showing 11-15 of 15 rows (page 2/2)" in buffer.getvalue()

    def test_show_filter_summary(self):
        display, buffer = make_display()

        display.show_filter_summary(3, 5, "email", "exclude")

        output = buffer.getvalue()
        assert "Filtered Results" in output
        assert "Removed rows" in output
        assert 'excluding those that match "email"' in output

    def test_show_filter_summary_include(self):
        display, buffer = make_display()

        display.show_filter_summary(2, 5, "email", "include")

        assert 'whose "email" value appears' in buffer.getvalue()

    def test_show_comparison(self):
        display, buffer = make_display()
        result = compare_rows([{"id": "1", "v": "a"}, {"id": "2", "v": "b"}],
                              [{"id": "1", "v": "a"}], "id", "v")

        display.show_comparison_summary(result)
        display.show_comparison_rows(result)

        output = buffer.getvalue()
        assert "Comparison: id -> v" in output
        assert "Only in Left" in output
        assert "50.0%" in output
        assert "only left" in output
        assert "Left v" in output

    def test_show_only_differences(self):
        display, buffer = make_display()
        result = compare_rows([{"id": "kept", "v": "a"}, {"id": "other", "v": "b"}],
                              [{"id": "kept", "v": "a"}, {"id": "other", "v": "c"}], "id", "v")

        display.show_comparison_rows(result, only_differences=True)

        output = buffer.getvalue()
        assert "other" in output
        assert "kept" not in output

    def test_log_messages(self):
        display, buffer = make_display()

        display.log_error("Broken", {"file": "a.csv"})
        display.log_success("Done")

        output = buffer.getvalue()
        assert "Broken" in output
        assert "file: a.csv" in output
        assert "Done" in output

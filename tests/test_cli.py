"""
Tests for the command line entry point.
"""

import io
import pytest
from pathlib import Path
import sys

from rich.console import Console

sys.path.insert(0, str(Path(__file__).parent.parent))

from main import main, run_filter, require_rows, SAMPLE_CONFIG_NAME
from csvrecon.core.errors import InvalidArgumentError, ParseError, INVALID_DATA
from csvrecon.core.parser import Table, parse_csv
from csvrecon.ui.display import ResultDisplay
from csvrecon.utils.logger import configure_logging


CUSTOMERS = (
    "email,name,balance\n"
    "alice@x.com,Alice,100\n"
    "bob@x.com,Bob,200\n"
    "carol@x.com,Carol,300\n"
)

UNSUBSCRIBED = (
    "email;reason\n"
    "BOB@X.COM;spam\n"
    "carol@x.com;moved\n"
)

CRM = (
    "email,balance\n"
    "alice@x.com,150\n"
    "bob@x.com,200\n"
    "dave@x.com,50\n"
)


class CliRunner:
    """Calls main() with a captured console."""

    def __init__(self):
        self.buffer = io.StringIO()
        self.display = ResultDisplay(Console(file=self.buffer, width=200))

    def __call__(self, *args) -> int:
        return main([str(arg) for arg in args], display=self.display)

    @property
    def output(self) -> str:
        return self.buffer.getvalue()


@pytest.fixture
def cli():
    yield CliRunner()
    configure_logging("INFO")


@pytest.fixture
def files(tmp_path):
    paths = {}
    for name, content in (("customers.csv", CUSTOMERS),
                          ("unsubscribed.csv", UNSUBSCRIBED),
                          ("crm.csv", CRM)):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        paths[name] = path
    return paths


class TestFilterCommand:
    """csvrecon filter."""

    def test_exclude_writes_output(self, cli, files, tmp_path):
        output = tmp_path / "out" / "kept.csv"

        code = cli("filter", files["customers.csv"], files["unsubscribed.csv"],
                   "--column", "email", "--output", output)

        assert code == 0
        assert output.read_bytes().decode("utf-8") == (
            "email,name,balance\r\n"
            "alice@x.com,Alice,100\r\n"
            "bob@x.com,Bob,200"
        )
        assert "Filtered Results" in cli.output

    def test_include_ignoring_case(self, cli, files, tmp_path):
        output = tmp_path / "kept.csv"

        code = cli("filter", files["customers.csv"], files["unsubscribed.csv"],
                   "-c", "email", "--mode", "include", "-i", "-o", output)

        assert code == 0
        lines = output.read_bytes().decode("utf-8").split("\r\n")
        assert lines[1:] == ["bob@x.com,Bob,200", "carol@x.com,Carol,300"]

    def test_column_must_be_in_right_headers(self, cli, files):
        code = cli("filter", files["customers.csv"], files["unsubscribed.csv"],
                   "--column", "name")

        assert code == 1
        assert "Column 'name' not found" in cli.output

    def test_empty_left_rejected(self, cli, files, tmp_path):
        empty = tmp_path / "empty.csv"
        empty.write_text("email\n\n", encoding="utf-8")

        code = cli("filter", empty, files["unsubscribed.csv"], "--column", "email")

        assert code == 1
        assert "No data found in CSV file" in cli.output

    def test_parse_error_reported(self, cli, files, tmp_path):
        dupes = tmp_path / "dupes.csv"
        dupes.write_text("email,email\na,b\n", encoding="utf-8")

        code = cli("filter", dupes, files["unsubscribed.csv"], "--column", "email")

        assert code == 1
        assert "duplicate column names: email" in cli.output

    def test_missing_file(self, cli, files, tmp_path):
        code = cli("filter", tmp_path / "nope.csv", files["crm.csv"], "--column", "email")

        assert code == 1
        assert "File not found" in cli.output


class TestCompareCommand:
    """csvrecon compare."""

    def test_writes_comparison(self, cli, files, tmp_path):
        output = tmp_path / "diff.csv"

        code = cli("compare", files["customers.csv"], files["crm.csv"],
                   "--key", "email", "--value", "balance", "--output", output)

        assert code == 0
        assert output.read_bytes().decode("utf-8").split("\r\n") == [
            "email,Left balance,Right balance,Status",
            "alice@x.com,100,150,diff",
            "bob@x.com,200,200,matched",
            "carol@x.com,300,,only left",
            "dave@x.com,,50,only right",
        ]
        assert "Only in Right" in cli.output

    def test_only_differences(self, cli, files, tmp_path):
        output = tmp_path / "diff.csv"

        code = cli("compare", files["customers.csv"], files["crm.csv"],
                   "-k", "email", "-V", "balance", "--only-differences", "-o", output)

        assert code == 0
        assert "matched" not in output.read_bytes().decode("utf-8")

    def test_blank_key_rejected(self, cli, files):
        code = cli("compare", files["customers.csv"], files["crm.csv"],
                   "--key", " ", "--value", "balance")

        assert code == 1
        assert "Key column name cannot be empty" in cli.output


class TestPreviewCommand:
    """csvrecon preview."""

    def test_preview(self, cli, tmp_path):
        path = tmp_path / "wide.csv"
        path.write_text("name,,\nJohn,Doe,25\n", encoding="utf-8")

        code = cli("preview", path)

        assert code == 0
        assert "(Empty column 2)" in cli.output
        assert "John" in cli.output


class TestRunCommand:
    """csvrecon run."""

    def write_config(self, tmp_path: Path, files) -> Path:
        config = tmp_path / "jobs.yaml"
        config.write_text(
            "datasets:\n"
            "  customers:\n"
            "    path: customers.csv\n"
            "  unsubscribed:\n"
            "    path: unsubscribed.csv\n"
            "    delimiter: ';'\n"
            "  crm:\n"
            "    path: crm.csv\n"
            "jobs:\n"
            "  - name: drop\n"
            "    operation: filter\n"
            "    left: customers\n"
            "    right: unsubscribed\n"
            "    column: email\n"
            "    case_insensitive: true\n"
            "    output: out/kept.csv\n"
            "  - name: balances\n"
            "    operation: compare\n"
            "    left: customers\n"
            "    right: crm\n"
            "    key_column: email\n"
            "    value_column: balance\n"
            "    only_differences: true\n"
            "    output: out/balances.csv\n",
            encoding="utf-8"
        )
        return config

    def test_runs_every_job(self, cli, files, tmp_path):
        config = self.write_config(tmp_path, files)

        code = cli("run", config)

        assert code == 0
        kept = (tmp_path / "out" / "kept.csv").read_bytes().decode("utf-8")
        assert kept == "email,name,balance\r\nalice@x.com,Alice,100"
        balances = (tmp_path / "out" / "balances.csv").read_bytes().decode("utf-8")
        assert len(balances.split("\r\n")) == 4

    def test_missing_config(self, cli, tmp_path):
        code = cli("run", tmp_path / "missing.yaml")

        assert code == 1
        assert "Configuration file not found" in cli.output

    def test_failing_job(self, cli, files, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text(
            "datasets:\n"
            "  customers:\n"
            "    path: customers.csv\n"
            "  crm:\n"
            "    path: crm.csv\n"
            "jobs:\n"
            "  - operation: filter\n"
            "    left: customers\n"
            "    right: crm\n"
            "    column: nope\n",
            encoding="utf-8"
        )

        code = cli("run", config)

        assert code == 1
        assert "Pipeline failed" in cli.output

    @pytest.mark.parametrize("content, message", [
        ("datasets: [unclosed\n", "Invalid YAML"),
        ("datasets:\n  customers: customers.csv\n", "Dataset customers: expected a mapping"),
        ("datasets:\n  customers:\n    path: customers.csv\njobs:\n  - just text\n",
         "Job 1: expected a mapping"),
    ])
    def test_malformed_config(self, cli, files, tmp_path, content, message):
        config = tmp_path / "broken.yaml"
        config.write_text(content, encoding="utf-8")

        code = cli("run", config)

        assert code == 1
        assert "Pipeline failed" in cli.output
        assert message in cli.output

    def test_filter_against_headerless_right_file(self, cli, files, tmp_path):
        (tmp_path / "blank.csv").write_text(",,\n,,\n", encoding="utf-8")
        config = tmp_path / "blank.yaml"
        config.write_text(
            "datasets:\n"
            "  customers:\n"
            "    path: customers.csv\n"
            "  blank:\n"
            "    path: blank.csv\n"
            "jobs:\n"
            "  - operation: filter\n"
            "    left: customers\n"
            "    right: blank\n"
            "    column: email\n"
            "    output: kept.csv\n",
            encoding="utf-8"
        )

        code = cli("run", config)

        assert code == 0
        kept = (tmp_path / "kept.csv").read_bytes().decode("utf-8")
        assert kept == CUSTOMERS.rstrip("\n").replace("\n", "\r\n")


class TestMainOptions:
    """Top-level flags."""

    def test_no_command_prints_help(self, cli, capsys):
        assert cli() == 1
        assert "usage" in capsys.readouterr().out

    def test_create_sample(self, cli, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert cli("--create-sample") == 0
        assert (tmp_path / SAMPLE_CONFIG_NAME).exists()

    def test_log_file(self, cli, files, tmp_path):
        log_file = tmp_path / "run.log"

        code = cli("--verbose", "--log-file", log_file, "compare",
                   files["customers.csv"], files["crm.csv"], "-k", "email", "-V", "balance")

        assert code == 0
        assert "comparator.completed" in log_file.read_text(encoding="utf-8")

    def test_missing_required_argument(self, cli, files):
        with pytest.raises(SystemExit):
            cli("filter", files["customers.csv"], files["crm.csv"])


class TestHelpers:
    """Functions shared by the commands and the job runner."""

    def test_require_rows(self):
        with pytest.raises(ParseError) as exc_info:
            require_rows(Table(["a"], []), "a.csv")

        assert exc_info.value.kind == INVALID_DATA
        assert exc_info.value.source_label == "a.csv"

    def test_run_filter_allows_right_headers(self):
        left = parse_csv("id\n1\n2", "left")
        right = parse_csv("id\n2", "right")

        assert run_filter(left, right, "id") == [{"id": "1"}]

    def test_run_filter_rejects_unknown_column(self):
        left = parse_csv("id\n1", "left")
        right = parse_csv("code\n1", "right")

        with pytest.raises(InvalidArgumentError, match="Available columns: 'code'"):
            run_filter(left, right, "id")

    def test_run_filter_headerless_right_keeps_left(self):
        left = parse_csv("id\n1\n2", "left")

        assert run_filter(left, Table([], []), "id") == left.data

    def test_run_filter_blank_column(self):
        left = parse_csv("id\n1", "left")

        with pytest.raises(InvalidArgumentError, match="empty column name"):
            run_filter(left, left, "  ")

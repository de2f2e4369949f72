"""
Integration tests for the codectx command line.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from click.testing import CliRunner

from codectx.main import cli

from tests.conftest import LOGGING_CS

pytestmark = pytest.mark.integration

WriteFile = Callable[[str, str], Path]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def invoke(runner: CliRunner, workspace_dir: Path, *args: str):
    return runner.invoke(cli, ["--base-dir", str(workspace_dir), *args], obj={})


class TestCli:
    """Tests for CLI commands that need no embedding service."""

    def test_grep(self, runner: CliRunner, workspace_dir: Path, write_file: WriteFile):
        path = write_file("Logging.cs", LOGGING_CS)

        result = invoke(runner, workspace_dir, "grep", "console.writeline")

        assert result.exit_code == 0
        assert f"{path}:5: Console.WriteLine(message);" in result.output

    def test_search_without_credentials(
        self, runner: CliRunner, workspace_dir: Path, write_file: WriteFile
    ):
        write_file("Logging.cs", LOGGING_CS)

        result = invoke(runner, workspace_dir, "search", "log an error")

        assert result.exit_code == 0
        assert "No results" in result.output

    def test_index_without_credentials(self, runner: CliRunner, workspace_dir: Path):
        result = invoke(runner, workspace_dir, "index")

        assert result.exit_code == 0
        assert "unavailable" in result.output

    def test_ignore_commands(self, runner: CliRunner, workspace_dir: Path):
        added = invoke(runner, workspace_dir, "ignore", "add", "*.log", "/bad")
        listed = invoke(runner, workspace_dir, "ignore", "list")
        removed = invoke(runner, workspace_dir, "ignore", "remove", "*.log", "*.env")
        cleared = invoke(runner, workspace_dir, "ignore", "clear")

        assert "Added *.log" in added.output
        assert "Invalid pattern: /bad" in added.output
        assert "*.log" in listed.output
        assert "*.env  (default)" in listed.output
        assert "Removed *.log" in removed.output
        assert "Cannot remove default pattern: *.env" in removed.output
        assert cleared.exit_code == 0
        assert (workspace_dir / ".codectx" / "ignore_patterns.json").exists()

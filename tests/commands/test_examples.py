"""Tests for the --examples flag on commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from prefixcop.cli import cli


class TestExamples:
    @pytest.mark.parametrize("command", ["check", "interfaces"])
    def test_examples_shown(self, cli_runner: CliRunner, command: str) -> None:
        result = cli_runner.invoke(cli, [command, "--examples"])
        assert result.exit_code == 0
        assert "Examples for" in result.output
        assert f"prefixcop {command}" in result.output

    def test_help_lists_examples_flag(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "--help"])
        assert "--examples" in result.output
        assert "--fail-on-error" in result.output

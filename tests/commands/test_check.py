"""Tests for the check CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from prefixcop.cli import cli
from tests.conftest import LOGGABLE_API, write_module


@pytest.mark.usefixtures("_isolated_project")
class TestCheckCommand:
    def test_empty_project_passes(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 0
        assert "No prefix violations found." in result.stdout

    def test_json_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "check"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["op"] == "check"
        assert data["data"]["count"] == 0
        assert data["data"]["policy"] == "enforcing"

    def test_violation_fails_build(self, cli_runner: CliRunner, loggable_project: Path) -> None:
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 1
        assert result.stdout == ""
        assert "1 prefix violations found:" in result.stderr
        assert "Type 'app.impl.Metric' implements 'app.api.Loggable'" in result.stderr

    def test_reporting_mode(self, cli_runner: CliRunner, loggable_project: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "check", "--fail-on-error", "false"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["data"]["count"] == 1
        assert data["data"]["policy"] == "reporting"

    def test_reporting_mode_logs_each_entry(
        self, cli_runner: CliRunner, loggable_project: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["check", "--fail-on-error", "false"])
        assert result.exit_code == 0
        assert "Metric" in result.stderr
        assert "Reporting only" in result.stdout

    def test_fail_on_error_from_config(self, cli_runner: CliRunner, loggable_project: Path) -> None:
        (loggable_project / "prefixcop.toml").write_text("[check]\nfail_on_error = false\n")
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 0

    def test_cli_overrides_config(self, cli_runner: CliRunner, loggable_project: Path) -> None:
        (loggable_project / "prefixcop.toml").write_text("[check]\nfail_on_error = false\n")
        result = cli_runner.invoke(cli, ["check", "--fail-on-error", "true"])
        assert result.exit_code == 1

    def test_base_package(self, cli_runner: CliRunner, loggable_project: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "check", "--base-package", "nothing"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["interfaces_found"] == 0

    def test_missing_source_dir(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "--source-dir", "missing"])
        assert result.exit_code == 1
        assert "Output directory does not exist" in result.stderr

    def test_fail_fast(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_module(
            project_root,
            "app/api.py",
            LOGGABLE_API.replace('@require_prefix("Log")', "@require_prefix"),
        )
        result = cli_runner.invoke(cli, ["check", "--malformed-policy", "fail-fast"])
        assert result.exit_code == 1
        assert "requires a prefix but none was declared" in result.stderr

    def test_invalid_policy(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "--malformed-policy", "ignore"])
        assert result.exit_code == 2

    def test_invalid_workers(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "--workers", "0"])
        assert result.exit_code == 2

    def test_quiet(self, cli_runner: CliRunner, loggable_project: Path) -> None:
        result = cli_runner.invoke(cli, ["-q", "check"])
        assert result.exit_code == 1
        assert "ERROR: check" in result.stderr

    def test_skipped_file_warning(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_module(project_root, "bad.py", "class (:\n")
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 0
        assert "WARNING: Skipped" in result.stderr

    def test_verbose_telemetry(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "--json", "check"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["meta"]["telemetry"]["name"] == "CheckService.check"

"""Shared pytest fixtures and test helpers for prefixcop tests."""

from __future__ import annotations

import textwrap
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from prefixcop.config.settings import PrefixSettings
from prefixcop.services.telemetry import disable_telemetry

LOGGABLE_API = """\
from typing import Protocol

from prefixcop import require_prefix


@require_prefix("Log")
class Loggable(Protocol):
    def log(self) -> None: ...
"""

LOGGABLE_IMPLS = """\
from app.api import Loggable


class LogFile(Loggable):
    def log(self) -> None:
        pass


class Metric(Loggable):
    def log(self) -> None:
        pass
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """``--verbose`` runs enable telemetry in the test's context."""
    yield
    disable_telemetry()


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary project directory with an empty ``src`` tree.

    Environment overrides are cleared so settings come only from the
    test's own files and arguments.
    """
    for var in ("PREFIXCOP_CONFIG", "PREFIXCOP_CHECK__FAIL_ON_ERROR", "PREFIXCOP_SCAN__SOURCE_DIR"):
        monkeypatch.delenv(var, raising=False)
    (tmp_path / "src").mkdir()
    return tmp_path


@pytest.fixture
def _isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp project so the CLI scans it.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def loggable_project(project_root: Path) -> Path:
    """Scenario project: ``Loggable`` (prefix "Log") with LogFile and Metric."""
    write_module(project_root, "app/__init__.py", "")
    write_module(project_root, "app/api.py", LOGGABLE_API)
    write_module(project_root, "app/impl.py", LOGGABLE_IMPLS)
    return project_root


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_module(root: Path, relpath: str, source: str, *, src_dir: str = "src") -> Path:
    """Write a Python module below ``root/src``, creating parent dirs."""
    path = root / src_dir / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source), encoding="utf-8")
    return path


def make_settings(root: Path, **overrides: Any) -> PrefixSettings:
    """Settings for *root* with ``scan``/``check`` section overrides.

    Keys of *overrides* are routed to the section that declares them.
    """
    scan_keys = {"source_dir", "base_package", "exclude"}
    scan = {k: v for k, v in overrides.items() if k in scan_keys}
    check = {k: v for k, v in overrides.items() if k not in scan_keys}
    settings = PrefixSettings.from_cli(project_root=root)
    return settings.with_overrides(scan=scan, check=check)

"""Tests for BaseService output directory resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from prefixcop.services.base import BaseService, ConfigurationError
from tests.conftest import make_settings


class TestResolveOutputDirectory:
    def test_relative_to_project_root(self, project_root: Path) -> None:
        service = BaseService(make_settings(project_root))
        assert service.resolve_output_directory() == project_root / "src"

    def test_custom_source_dir(self, project_root: Path) -> None:
        (project_root / "lib").mkdir()
        service = BaseService(make_settings(project_root, source_dir="lib"))
        assert service.resolve_output_directory() == project_root / "lib"

    def test_missing_raises(self, tmp_path: Path) -> None:
        service = BaseService(make_settings(tmp_path, source_dir="absent"))
        with pytest.raises(ConfigurationError, match="Output directory does not exist") as info:
            service.resolve_output_directory()
        assert info.value.code == "OUTPUT_DIR_MISSING"
        assert info.value.path == tmp_path / "absent"

    def test_file_is_not_a_directory(self, tmp_path: Path) -> None:
        (tmp_path / "src").write_text("", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            BaseService(make_settings(tmp_path)).resolve_output_directory()

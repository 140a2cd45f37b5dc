"""Tests for configuration models."""

from __future__ import annotations

import pydantic
import pytest

from prefixcop.config.models import CheckConfig, PrefixConfig, ScanConfig
from prefixcop.domain.types import MalformedPolicy


class TestScanConfig:
    def test_defaults(self) -> None:
        config = ScanConfig()
        assert config.source_dir == "src"
        assert config.base_package is None
        assert "__pycache__" in config.exclude

    def test_blank_base_package_means_everything(self) -> None:
        assert ScanConfig(base_package="  ").base_package is None


class TestCheckConfig:
    def test_policy_from_string(self) -> None:
        assert CheckConfig(malformed_policy="fail-fast").malformed_policy is MalformedPolicy.FAIL_FAST  # type: ignore[arg-type]

    def test_unknown_policy_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            CheckConfig(malformed_policy="ignore")  # type: ignore[arg-type]

    def test_workers_positive(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            CheckConfig(max_workers=0)


class TestPrefixConfig:
    def test_sparse_sections(self) -> None:
        config = PrefixConfig.model_validate({"check": {"fail_on_error": False}})
        assert config.check.fail_on_error is False
        assert config.scan == ScanConfig()

    def test_frozen(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            PrefixConfig().scan.source_dir = "lib"  # type: ignore[misc]

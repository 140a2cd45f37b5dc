"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``prefixcop.toml`` (or
``[tool.prefixcop]`` in ``pyproject.toml``) only contains overrides.
An empty file checks every package under ``src`` and fails on error.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from prefixcop.domain.types import MalformedPolicy
from prefixcop.infrastructure.scanner import DEFAULT_EXCLUDES


class ScanConfig(BaseModel):
    """[scan] section."""

    model_config = {"frozen": True}

    source_dir: str = "src"
    base_package: str | None = None
    exclude: tuple[str, ...] = tuple(sorted(DEFAULT_EXCLUDES))

    @field_validator("base_package")
    @classmethod
    def _blank_means_everything(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


class CheckConfig(BaseModel):
    """[check] section."""

    model_config = {"frozen": True}

    fail_on_error: bool = True
    malformed_policy: MalformedPolicy = MalformedPolicy.AGGREGATE
    max_workers: int | None = Field(default=None, ge=1)


class PrefixConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    scan: ScanConfig = Field(default_factory=ScanConfig)
    check: CheckConfig = Field(default_factory=CheckConfig)

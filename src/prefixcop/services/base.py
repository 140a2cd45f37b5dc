"""BaseService — foundation for all prefixcop services.

Every service receives the resolved :class:`PrefixSettings` at
construction time and reads its scan and policy options from there.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prefixcop.config.settings import PrefixSettings


class ConfigurationError(Exception):
    """The configured scan target cannot be used. Always fatal."""

    code = "OUTPUT_DIR_MISSING"

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class CheckService(BaseService):
            def check(self) -> ServiceResult:
                directory = self.resolve_output_directory()
                ...
    """

    def __init__(self, settings: PrefixSettings) -> None:
        self._settings = settings

    @property
    def settings(self) -> PrefixSettings:
        return self._settings

    def resolve_output_directory(self) -> Path:
        """Locate the directory holding the packages to scan.

        Relative ``scan.source_dir`` values are resolved against the
        project root. Raises :class:`ConfigurationError` when the
        directory does not exist: there is nothing to check.
        """
        directory = Path(self._settings.scan.source_dir)
        if not directory.is_absolute():
            directory = self._settings.project_root / directory
        if not directory.is_dir():
            raise ConfigurationError(
                f"Output directory does not exist: '{directory}'",
                path=directory,
            )
        return directory

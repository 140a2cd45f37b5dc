"""AppContext — per-invocation state shared by ``check`` and ``interfaces``.

The root group builds one from the resolved settings. It sets up logging
before any scan starts, so every violation warning reaches stderr, and
turns each ServiceResult into output plus the exit status the build sees.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from prefixcop.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from prefixcop.config.settings import PrefixSettings
    from prefixcop.services.result import ServiceResult


class AppContext:
    """Resolved settings plus result emission for one CLI run."""

    def __init__(self, settings: PrefixSettings) -> None:
        self.settings = settings

        from prefixcop.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from prefixcop.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def output(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and stop the build when it failed.

        A passing run goes to stdout; files skipped during the scan are
        listed on stderr (JSON output already carries them). A failing
        run goes to stderr and exits with ``result.exit_code``.
        """
        settings = self.output
        rendered = format_result(result, settings=settings)
        if not result.ok:
            click.echo(rendered, err=True)
            raise SystemExit(result.exit_code)

        click.echo(rendered)
        if not settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)

"""Command: list constrained interfaces and their implementors."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from prefixcop.commands._base import PrefixCommand, scan_options

if TYPE_CHECKING:
    from prefixcop.commands._context import AppContext


@click.command(
    cls=PrefixCommand,
    examples="""\
  prefixcop interfaces
  prefixcop interfaces --base-package myapp.storage
  prefixcop --json interfaces""",
)
@scan_options
@click.pass_obj
def interfaces(app: AppContext, source_dir: str | None, base_package: str | None) -> None:
    """List constrained interfaces, their prefixes, and implementors."""
    from prefixcop.services.check import CheckService

    settings = app.settings.with_overrides(
        scan={"source_dir": source_dir, "base_package": base_package},
    )
    app.emit(CheckService(settings).interfaces())

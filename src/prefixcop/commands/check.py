"""Command: enforce the prefix naming convention."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from prefixcop.commands._base import PrefixCommand, scan_options

if TYPE_CHECKING:
    from prefixcop.commands._context import AppContext


@click.command(
    cls=PrefixCommand,
    examples="""\
  prefixcop check
  prefixcop check --base-package myapp.plugins
  prefixcop check --fail-on-error false
  prefixcop check --malformed-policy fail-fast
  prefixcop --json check --source-dir build/lib""",
)
@scan_options
@click.option(
    "--fail-on-error",
    type=bool,
    default=None,
    metavar="BOOLEAN",
    help="Fail the run when violations are found (default: true).",
)
@click.option(
    "--malformed-policy",
    type=click.Choice(["aggregate", "fail-fast"]),
    default=None,
    help="Report missing prefixes with the other issues, or stop at the first one.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Worker threads for scanning and validation (default: CPU count).",
)
@click.pass_obj
def check(
    app: AppContext,
    source_dir: str | None,
    base_package: str | None,
    fail_on_error: bool | None,
    malformed_policy: str | None,
    workers: int | None,
) -> None:
    """Check that implementors of constrained interfaces carry the prefix."""
    from prefixcop.services.check import CheckService

    settings = app.settings.with_overrides(
        scan={"source_dir": source_dir, "base_package": base_package},
        check={
            "fail_on_error": fail_on_error,
            "malformed_policy": malformed_policy,
            "max_workers": workers,
        },
    )
    app.emit(CheckService(settings).check())

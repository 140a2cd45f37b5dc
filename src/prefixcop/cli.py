"""Root CLI group for prefixcop.

Global flags select output and logging; scan and policy options live on
the subcommands. Settings are resolved once here (flags, env, config
file) and shared through :class:`AppContext`.
"""

from __future__ import annotations

import click

from prefixcop import __version__
from prefixcop.commands import register_commands
from prefixcop.commands._context import AppContext
from prefixcop.config.settings import PrefixSettings

_EPILOG = """\
Exit status: 0 when the check passes (or only reports), 1 when the
build should stop, 2 on usage errors."""


@click.group(invoke_without_command=True, epilog=_EPILOG)
@click.version_option(version=__version__, prog_name="prefixcop")
@click.option("--json", "json_output", is_flag=True, help="Print the result as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the status line.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and phase timings.")
@click.option("--log-json", is_flag=True, help="Log to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    help="Config file to use instead of prefixcop.toml / [tool.prefixcop] discovery.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """prefixcop — check that interface implementors carry the required name prefix."""
    settings = PrefixSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)

"""Subcommand modules for prefixcop.

Provides register_commands() which uses deferred imports to keep
``prefixcop --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from prefixcop.commands.check import check
    from prefixcop.commands.interfaces import interfaces

    cli.add_command(check)
    cli.add_command(interfaces)

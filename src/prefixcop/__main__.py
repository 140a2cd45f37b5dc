"""Allow ``python -m prefixcop`` from build scripts."""

from prefixcop.cli import cli

cli()

"""CLI entry point for ChainScout.

Registered as `chainscout` console script in pyproject.toml.
"""

from __future__ import annotations

import click

from cli.networks_cmd import networks_cmd
from cli.query_cmd import query_cmd


@click.group()
@click.version_option(version="0.1.0", prog_name="ChainScout")
def cli() -> None:
    """ChainScout — ask for on-chain balances in plain language."""


cli.add_command(query_cmd, "query")
cli.add_command(networks_cmd, "networks")


if __name__ == "__main__":
    cli()

"""chainscout networks — List the networks balance queries can target."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from core.balance.networks import NetworkRegistry, rpc_env_var
from core.config import load_config

console = Console()


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Path to config.yaml",
)
def networks_cmd(config_path: str | None) -> None:
    """Show configured networks and their RPC endpoints."""
    cfg = load_config(config_path)
    try:
        registry = NetworkRegistry.from_config(cfg.networks)
    except ValueError as e:
        console.print(f"[red]Invalid network configuration:[/red] {e}")
        raise SystemExit(1) from e

    table = Table(title="Configured networks", border_style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Chain ID", justify="right")
    table.add_column("Native")
    table.add_column("RPC endpoint")
    table.add_column("Override env", style="dim")

    for net in registry:
        table.add_row(
            net.name, str(net.chain_id), net.native_symbol, net.rpc_url, rpc_env_var(net.name)
        )

    console.print(table)

"""chainscout query — One-shot balance query from free text.

Example::

    chainscout query "what's the balance of 0x742d...f44e on base?"
"""

from __future__ import annotations

import asyncio
import json

import click
from rich.console import Console
from rich.panel import Panel

from core.balance.models import ConversationState
from core.balance.networks import NetworkRegistry
from core.balance.wallet import format_units
from core.config import Config, load_config
from core.log_setup import setup_logging
from core.router import LLMRouter
from tools.balance.query_tool import ActionResult, BalanceQueryTool

console = Console()


async def _run_query(cfg: Config, registry: NetworkRegistry, text: str) -> ActionResult:
    tool = BalanceQueryTool(cfg, LLMRouter(cfg), registry)
    state = ConversationState(messages=[{"role": "user", "content": text}])
    return await tool.run(state)


@click.command()
@click.argument("text", nargs=-1, required=True)
@click.option(
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Path to config.yaml",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the raw payload")
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
def query_cmd(text: tuple[str, ...], config_path: str | None, as_json: bool, debug: bool) -> None:
    """Ask for a balance in plain language."""
    setup_logging(debug=debug)
    cfg = load_config(config_path)

    try:
        registry = NetworkRegistry.from_config(cfg.networks)
    except ValueError as e:
        console.print(f"[red]Invalid network configuration:[/red] {e}")
        raise SystemExit(1) from e

    outcome = asyncio.run(_run_query(cfg, registry, " ".join(text)))

    if as_json:
        click.echo(json.dumps({"text": outcome.text, **outcome.content}, indent=2))
    elif outcome.success:
        content = outcome.content
        net = registry.resolve(content["chain"])
        amount = format_units(content["amount"], net.decimals)
        body = (
            f"[bold]{content['address']}[/bold] on [cyan]{content['chain']}[/cyan]\n"
            f"Amount: {content['amount']} wei ([green]{amount} {net.native_symbol}[/green])"
        )
        console.print(Panel(body, title="[bold]Balance[/bold]", border_style="green"))
    else:
        console.print(Panel(outcome.text, title="[bold]Balance query failed[/bold]", border_style="red"))
        available = outcome.content.get("available")
        if available:
            console.print(f"[dim]Configured chains: {', '.join(available)}[/dim]")

    if not outcome.success:
        raise SystemExit(1)

"""
CLI Interface for the pNode stats bot.

Provides command-line access to the report, the raw RPC endpoint and the bot.
"""

import asyncio
import json
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .bot import run_bot
from .config import get_settings
from .rpc import RpcClient, RpcClientError
from .stats import PodStatsCollector

console = Console()
app = typer.Typer(
    name="pnode-bot",
    help="📡 pNodes Bot - Version stats for the pNode network",
    add_completion=False,
)

config_app = typer.Typer(help="Configuration management")
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    if value:
        console.print(f"[cyan]pNodes Bot[/cyan] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
):
    """
    📡 pNodes Bot

    Reports pNode version counts from a local JSON-RPC daemon.
    """
    pass


def _rpc_client(url: Optional[str]) -> RpcClient:
    settings = get_settings()
    return RpcClient(url or settings.rpc_url, timeout=settings.rpc_timeout_seconds)


def _parse_param(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


# =============================================================================
# Stats Commands
# =============================================================================

@app.command("report")
def report(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="RPC endpoint (defaults to RPC_URL)"),
    table: bool = typer.Option(False, "--table", "-t", help="Show a table instead of the chat message"),
):
    """
    Print the pNodes version report.

    Examples:

        pnode-bot report

        pnode-bot report --table --url http://10.0.0.5:6000/rpc
    """
    async def _run() -> int:
        async with _rpc_client(url) as rpc:
            collector = PodStatsCollector(rpc)
            if not table:
                console.print(await collector.build_report(), markup=False, highlight=False)
                return 0
            try:
                stats = await collector.collect()
            except RpcClientError as e:
                console.print(f"[red]Error retrieving data: {escape(str(e))}[/red]")
                return 1
            collector.print_table(stats)
            return 0

    raise typer.Exit(asyncio.run(_run()))


@app.command("rpc")
def rpc_call(
    method: str = typer.Argument(..., help="RPC method name, e.g. get-pods"),
    params: Optional[list[str]] = typer.Argument(None, help="Positional params (JSON where possible)"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="RPC endpoint (defaults to RPC_URL)"),
):
    """
    Call a JSON-RPC method and print its result.

    Example:
        pnode-bot rpc get-pods
    """
    parsed = [_parse_param(p) for p in params or []]

    async def _run():
        async with _rpc_client(url) as rpc:
            return await rpc.call(method, parsed)

    try:
        result = asyncio.run(_run())
    except RpcClientError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print_json(json.dumps(result))


@app.command("run")
def run():
    """
    Start the Telegram bot.

    Answers /pnodes with the current report. Press Ctrl+C to stop.
    """
    if not get_settings().telegram_bot_token:
        console.print("[red]TELEGRAM_BOT_TOKEN is not set[/red]")
        raise typer.Exit(1)

    try:
        asyncio.run(run_bot())
    except KeyboardInterrupt:
        console.print("\n[yellow]Bot stopped[/yellow]")
    except Exception as e:
        console.print(f"[red]Bot failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)


# =============================================================================
# Config Commands
# =============================================================================

@config_app.command("show")
def config_show():
    """
    Show current configuration.
    """
    settings = get_settings()

    console.print("\n[bold cyan]Configuration[/bold cyan]\n")

    console.print("[bold]Telegram:[/bold]")
    console.print(f"  Bot Token: {'✓ Configured' if settings.telegram_bot_token else '✗ Not set'}")
    console.print(f"  Poll Timeout: {settings.telegram_poll_timeout}s")

    console.print("\n[bold]RPC:[/bold]")
    console.print(f"  URL: {escape(settings.rpc_url)}")
    console.print(f"  Timeout: {settings.rpc_timeout_seconds}s")


@config_app.command("validate")
def config_validate():
    """
    Validate configuration.
    """
    errors = []
    warnings = []

    settings = get_settings()

    if not settings.telegram_bot_token:
        errors.append("Telegram bot token not configured (bot cannot start)")
    if not settings.rpc_url.startswith(("http://", "https://")):
        errors.append(f"RPC URL is not an http(s) URL: {settings.rpc_url}")
    elif not settings.rpc_url.startswith(("http://127.0.0.1", "http://localhost")):
        warnings.append(f"RPC URL is not local: {settings.rpc_url}")

    if errors:
        console.print("[bold red]Errors:[/bold red]")
        for e in errors:
            console.print(f"  ✗ {escape(e)}")

    if warnings:
        console.print("[bold yellow]Warnings:[/bold yellow]")
        for w in warnings:
            console.print(f"  ⚠ {escape(w)}")

    if not errors and not warnings:
        console.print("[bold green]✓ Configuration is valid[/bold green]")

    raise typer.Exit(1 if errors else 0)


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()

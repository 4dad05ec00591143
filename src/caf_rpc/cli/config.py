"""CLI: caf-rpc config show|set|clear"""

import click
from rich.console import Console
from rich.table import Table

from caf_rpc.cli.settings import KEYS, load_config, save_config

console = Console()


@click.group()
def config():
    """Saved defaults for building messages."""


@config.command("show")
def config_show():
    """Show saved defaults."""
    cfg = load_config()
    if not cfg:
        console.print("[yellow]No saved defaults. Use `caf-rpc config set`.[/yellow]")
        return
    table = Table(title="caf-rpc defaults")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key in KEYS:
        if key in cfg:
            table.add_row(key, str(cfg[key]))
    console.print(table)


@config.command("set")
@click.argument("key", type=click.Choice(KEYS))
@click.argument("value")
def config_set(key, value):
    """Save a default."""
    cfg = load_config()
    save_config({**cfg, key: value})
    console.print(f"[green]{key} saved.[/green]")


@config.command("clear")
def config_clear():
    """Forget all saved defaults."""
    save_config({})
    console.print("[green]Defaults cleared.[/green]")

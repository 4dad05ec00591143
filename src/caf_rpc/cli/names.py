"""CLI: caf-rpc names split|join"""

import click
from rich.console import Console

from caf_rpc.errors import InvalidName
from caf_rpc.names import join_name_array, split_name

console = Console()


@click.group()
def names():
    """Compound CA names."""


@names.command("split")
@click.argument("name")
@click.option("--separator", "-s", default=None, help="Separator (default '-')")
def names_split(name, separator):
    """Split a name into its 2 to 4 parts, one per line."""
    try:
        parts = split_name(name, separator)
    except InvalidName as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    for part in parts:
        click.echo(part)


@names.command("join")
@click.argument("parts", nargs=-1, required=True)
@click.option("--separator", "-s", default=None, help="Separator (default '-')")
def names_join(parts, separator):
    """Join parts into a compound name."""
    click.echo(join_name_array(parts, separator))

"""
caf-rpc CLI — `caf-rpc` command.

Commands:
  caf-rpc request <to> <method> [args]   Print a request envelope
  caf-rpc notify <to> <method> [args]    Print a notification envelope
  caf-rpc inspect [file]                 Decode and describe a message
  caf-rpc codes                          System error taxonomy
  caf-rpc names split|join               Compound CA names
  caf-rpc config show|set|clear          Saved defaults
"""

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install caf-rpc[cli]")

from caf_rpc import __version__

console = Console()


@click.group()
@click.version_option(__version__)
def main():
    """CAF JSON-RPC envelope tool."""


# Register subcommands from separate modules
from caf_rpc.cli.config import config
from caf_rpc.cli.messages import codes_cmd, inspect_cmd, notify_cmd, request_cmd
from caf_rpc.cli.names import names

main.add_command(request_cmd)
main.add_command(notify_cmd)
main.add_command(inspect_cmd)
main.add_command(codes_cmd)
main.add_command(names)
main.add_command(config)


if __name__ == "__main__":
    main()

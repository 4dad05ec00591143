"""CLI: caf-rpc request|notify|inspect|codes"""

import json
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table

from caf_rpc.cli.settings import resolve
from caf_rpc.envelope import (
    DEFAULT_FROM,
    DEFAULT_SESSION,
    DUMMY_TOKEN,
    decode,
    get_app_reply_data,
    get_app_reply_error,
    get_meta,
    get_method_args,
    get_system_error_code,
    get_system_error_data,
    get_system_error_msg,
    make_notification,
    make_request,
    to_wire,
)
from caf_rpc.errors import InvalidMessageShape
from caf_rpc.models.codes import RECOVERABLE_CODES, ErrorCode, code_name
from caf_rpc.models.envelope import MessageKind
from caf_rpc.replies import accounts_url, is_error_recoverable, redirect_destination

console = Console()


def _parse_arg(raw: str) -> Any:
    """JSON when it parses, the plain string otherwise."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _echo(msg) -> None:
    click.echo(json.dumps(to_wire(msg), indent=2, default=str))


@click.command("request")
@click.argument("to")
@click.argument("method")
@click.argument("args", nargs=-1)
@click.option("--token", default=None, help="Auth token")
@click.option("--from", "from_", default=None, help="Source CA")
@click.option("--session", default=None, help="Session id")
@click.option("--id", "request_id", default=None, help="Request id (random if omitted)")
def request_cmd(to, method, args, token: Optional[str], from_: Optional[str], session: Optional[str], request_id):
    """Print a request envelope."""
    msg = make_request(
        resolve("token", token, DUMMY_TOKEN),
        to,
        resolve("from", from_, DEFAULT_FROM),
        resolve("session_id", session, DEFAULT_SESSION),
        method,
        *[_parse_arg(a) for a in args],
        request_id=request_id,
    )
    _echo(msg)


@click.command("notify")
@click.argument("to")
@click.argument("method")
@click.argument("args", nargs=-1)
@click.option("--from", "from_", default=None, help="Source CA")
@click.option("--session", default=None, help="Session id")
def notify_cmd(to, method, args, from_: Optional[str], session: Optional[str]):
    """Print a notification envelope."""
    msg = make_notification(
        to,
        resolve("from", from_, DEFAULT_FROM),
        resolve("session_id", session, DEFAULT_SESSION),
        method,
        *[_parse_arg(a) for a in args],
    )
    _echo(msg)


@click.command("inspect")
@click.argument("source", type=click.File("r"), default="-")
@click.option("--json-output", "--json", is_flag=True, help="Print the normalized wire form")
def inspect_cmd(source, json_output):
    """Decode a message (file or stdin) and describe it."""
    try:
        msg = decode(source.read())
    except InvalidMessageShape as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    if json_output:
        _echo(msg)
        return

    kind = msg.kind()
    table = Table(title=f"{kind.value} message")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("id", str(getattr(msg, "id", "-")))
    meta = get_meta(msg)
    for key, value in (meta.to_wire() if meta is not None else {}).items():
        table.add_row(f"meta.{key}", str(value))

    if kind in (MessageKind.REQUEST, MessageKind.NOTIFICATION):
        table.add_row("method", msg.method)
        table.add_row("args", json.dumps(get_method_args(msg), default=str))
    elif kind is MessageKind.APP_REPLY:
        table.add_row("error", json.dumps(get_app_reply_error(msg), default=str))
        table.add_row("data", json.dumps(get_app_reply_data(msg), default=str))
    else:
        code = get_system_error_code(msg)
        table.add_row("code", f"{code} ({code_name(code)})")
        table.add_row("message", get_system_error_msg(msg) or "")
        table.add_row("recoverable", "yes" if is_error_recoverable(msg) else "no")
        destination = redirect_destination(msg)
        if destination:
            table.add_row("redirect to", destination)
        url = accounts_url(msg)
        if url:
            table.add_row("accounts URL", url)
        table.add_row("data", json.dumps(get_system_error_data(msg), default=str))
    console.print(table)


@click.command("codes")
def codes_cmd():
    """List system error codes."""
    table = Table(title="System error codes")
    table.add_column("Code", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Recoverable")
    for code in ErrorCode:
        table.add_row(str(code.value), code.name, "yes" if code in RECOVERABLE_CODES else "no")
    console.print(table)

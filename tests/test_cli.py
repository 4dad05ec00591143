"""Tests for the caf-rpc command line tool."""

import json

import pytest
from click.testing import CliRunner

from caf_rpc import decode, get_token, is_request, make_request, reply, redirect, encode
from caf_rpc.cli.main import main
from caf_rpc.cli.settings import load_config, resolve


@pytest.fixture(autouse=True)
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr("caf_rpc.cli.settings.CONFIG_FILE", path)
    return path


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def test_request(runner):
    result = runner.invoke(
        main, ["request", "app-ca", "doit", "1", "hello", "--token", "t", "--from", "me", "--id", "r1"]
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "jsonrpc": "2.0",
        "method": "doit",
        "params": [{"token": "t", "sessionId": "default", "to": "app-ca", "from": "me"}, 1, "hello"],
        "id": "r1",
    }


def test_request_uses_saved_defaults(runner, config_file):
    assert runner.invoke(main, ["config", "set", "token", "saved-token"]).exit_code == 0
    assert json.loads(config_file.read_text()) == {"token": "saved-token"}
    result = runner.invoke(main, ["request", "app-ca", "doit"])
    msg = decode(result.output)
    assert is_request(msg)
    assert get_token(msg) == "saved-token"


def test_notify(runner):
    result = runner.invoke(main, ["notify", "app-ca", "ping", '{"a": 1}', "--session", "s9"])
    assert result.exit_code == 0, result.output
    wire = json.loads(result.output)
    assert "id" not in wire
    assert wire["params"] == [{"sessionId": "s9", "to": "app-ca", "from": "NOBODY-UNKNOWN"}, {"a": 1}]


def test_inspect_request(runner):
    msg = make_request("t", "app-ca", "me", "s1", "doit", 5)
    result = runner.invoke(main, ["inspect"], input=encode(msg))
    assert result.exit_code == 0, result.output
    assert "request" in result.output
    assert "doit" in result.output


def test_inspect_redirect(runner):
    req = make_request("t", "app-ca", "me", "s1", "doit")
    result = runner.invoke(main, ["inspect"], input=encode(redirect(req, "move", {"remoteNode": "node2"})))
    assert result.exit_code == 0, result.output
    assert "FORCE_REDIRECT" in result.output
    assert "node2" in result.output


def test_inspect_json(runner):
    req = make_request("t", "app-ca", "me", "s1", "doit")
    result = runner.invoke(main, ["inspect", "--json"], input=encode(reply(None, req, "ok")))
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["result"][2] == "ok"


def test_inspect_rejects_garbage(runner):
    result = runner.invoke(main, ["inspect"], input="{}")
    assert result.exit_code == 1


def test_codes(runner):
    result = runner.invoke(main, ["codes"])
    assert result.exit_code == 0
    assert "METHOD_NOT_FOUND" in result.output
    assert "-32006" in result.output


def test_names_split(runner):
    result = runner.invoke(main, ["names", "split", "pub-app-owner-local"])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["pub", "app", "owner", "local"]


def test_names_split_invalid(runner):
    result = runner.invoke(main, ["names", "split", "onlyone"])
    assert result.exit_code == 1


def test_names_join(runner):
    result = runner.invoke(main, ["names", "join", "pub", "app", "-s", "#"])
    assert result.output.strip() == "pub#app"


def test_config_show_and_clear(runner, config_file):
    runner.invoke(main, ["config", "set", "from", "alice-phone"])
    shown = runner.invoke(main, ["config", "show"])
    assert "alice-phone" in shown.output
    runner.invoke(main, ["config", "clear"])
    assert json.loads(config_file.read_text()) == {}


def test_flag_overrides_saved_default(runner, config_file):
    runner.invoke(main, ["config", "set", "session_id", "saved"])
    result = runner.invoke(main, ["notify", "app-ca", "ping", "--session", "flag"])
    assert json.loads(result.output)["params"][0]["sessionId"] == "flag"
    assert resolve("session_id", None, "fallback") == "saved"
    assert resolve("token", None, "fallback") == "fallback"


def test_unreadable_config_is_empty(config_file):
    config_file.write_text("[1, 2]")
    assert load_config() == {}
    config_file.write_text("{not json")
    assert load_config() == {}

"""Tests for reply assembly, redirects and error classification."""

import json

import pytest

from caf_rpc import (
    DEFAULT_FROM,
    DEFAULT_REQUEST_ID,
    DEFAULT_SESSION,
    DUMMY_TOKEN,
    SYSTEM_FROM,
    AppError,
    ErrorCode,
    SysError,
    UnknownErrorKind,
    accounts_url,
    decode,
    encode,
    get_app_reply_data,
    get_app_reply_error,
    get_from,
    get_session_id,
    get_system_error_code,
    get_system_error_data,
    get_system_error_msg,
    get_to,
    get_token,
    is_app_reply,
    is_error_recoverable,
    is_not_authenticated,
    is_not_authorized,
    is_redirect,
    is_system_error,
    make_notification,
    make_request,
    make_system_error,
    meta_freeze,
    not_authenticated,
    redirect,
    redirect_destination,
    reply,
    set_to,
    to_wire,
)

RECOVERABLE = {
    ErrorCode.NO_SUCH_CA,
    ErrorCode.SHUTDOWN_CA,
    ErrorCode.CHECKPOINT_FAILURE,
    ErrorCode.PREPARE_FAILURE,
    ErrorCode.COMMIT_FAILURE,
    ErrorCode.BEGIN_FAILURE,
    ErrorCode.INTERNAL_ERROR,
}


@pytest.fixture()
def req():
    return make_request("tok", "app-counter", "user-client", "s1", "increment", 2)


class TestReply:
    def test_app_reply_swaps_addresses(self, req):
        msg = reply(None, req, "ok")
        assert is_app_reply(msg)
        assert not is_system_error(msg)
        assert get_to(msg) == "user-client"
        assert get_from(msg) == "app-counter"
        assert get_token(msg) == "tok"
        assert get_session_id(msg) == "s1"
        assert msg.id == req.id
        assert get_app_reply_error(msg) is None
        assert get_app_reply_data(msg) == "ok"

    def test_app_reply_wire_shape(self, req):
        wire = to_wire(reply(None, req, {"count": 3}))
        assert wire == {
            "jsonrpc": "2.0",
            "result": [
                {"token": "tok", "sessionId": "s1", "to": "user-client", "from": "app-counter"},
                None,
                {"count": 3},
            ],
            "id": req.id,
        }

    def test_system_error_reply(self, req):
        msg = reply(SysError(req, ErrorCode.SHUTDOWN_CA, "down"), req)
        assert is_system_error(msg)
        assert not is_app_reply(msg)
        assert get_system_error_code(msg) == ErrorCode.SHUTDOWN_CA
        assert get_system_error_msg(msg) == "down"
        assert get_system_error_data(msg)["message"] == "down"
        assert get_system_error_data(msg)["request"] is req
        assert get_to(msg) == "user-client"
        assert msg.id == req.id

    def test_app_error_reply(self, req):
        msg = reply(AppError(req, "AppError", {"why": "negative"}))
        assert is_app_reply(msg)
        assert get_app_reply_error(msg)["why"] == "negative"
        assert get_app_reply_data(msg) is None

    @pytest.mark.parametrize("error", [ValueError("x"), "oops", {"code": -32000}])
    def test_unknown_error_kind(self, req, error):
        with pytest.raises(UnknownErrorKind):
            reply(error, req)

    def test_reply_meta_is_a_copy(self, req):
        meta_freeze(req)
        msg = reply(None, req, 1)
        set_to(msg, "elsewhere")
        assert get_to(msg) == "elsewhere"
        assert get_to(req) == "app-counter"

    def test_notification_reply_uses_default_id(self):
        note = make_notification("app-counter", "user-client", "s1", "increment", 1)
        assert reply(None, note, 1).id == DEFAULT_REQUEST_ID

    def test_system_error_without_request(self):
        msg = make_system_error(None, ErrorCode.PARSE_ERROR, "Parse error")
        assert is_system_error(msg)
        assert msg.id == DEFAULT_REQUEST_ID
        assert get_token(msg) == DUMMY_TOKEN
        assert get_session_id(msg) == DEFAULT_SESSION
        assert get_to(msg) == DEFAULT_FROM
        assert get_from(msg) == SYSTEM_FROM

    def test_system_error_encodes_request(self, req):
        wire = json.loads(encode(reply(SysError(req, ErrorCode.NO_SUCH_CA, "gone"))))
        assert wire["error"]["code"] == -32000
        assert wire["error"]["data"][0]["to"] == "user-client"
        assert wire["error"]["data"][1]["request"]["method"] == "increment"
        assert wire["error"]["data"][1]["request"]["params"][1] == 2

    def test_decoded_system_error_keeps_classification(self, req):
        msg = decode(encode(reply(SysError(req, ErrorCode.COMMIT_FAILURE, "retry"))))
        assert is_system_error(msg)
        assert is_error_recoverable(msg)


class TestRedirect:
    def test_redirect(self, req):
        msg = redirect(req, "move")
        assert is_redirect(msg)
        assert is_system_error(msg)
        assert get_system_error_code(msg) == ErrorCode.FORCE_REDIRECT
        assert redirect_destination(msg) is None

    def test_redirect_destination(self, req):
        msg = redirect(req, "move", {"remoteNode": "node2.example.com"})
        assert redirect_destination(msg) == "node2.example.com"

    def test_not_a_redirect(self, req):
        assert not is_redirect(reply(None, req, 1))
        assert redirect_destination(reply(None, req, 1)) is None
        assert redirect_destination(make_system_error(req, ErrorCode.NO_SUCH_CA, "x", {"remoteNode": "n"})) is None


class TestAuthErrors:
    def test_not_authenticated(self, req):
        msg = not_authenticated(req, "login first", {"accountsURL": "https://accounts.example.com"})
        assert is_not_authenticated(msg)
        assert accounts_url(msg) == "https://accounts.example.com"
        assert not is_error_recoverable(msg)

    def test_accounts_url_only_for_not_authenticated(self, req):
        msg = make_system_error(req, ErrorCode.NOT_AUTHORIZED, "no", {"accountsURL": "https://a"})
        assert is_not_authorized(msg)
        assert not is_not_authenticated(msg)
        assert accounts_url(msg) is None


class TestRecoverable:
    @pytest.mark.parametrize("code", list(ErrorCode))
    def test_recoverable_codes(self, req, code):
        msg = make_system_error(req, code, "failure")
        assert is_error_recoverable(msg) is (code in RECOVERABLE)

    def test_non_system_errors_not_recoverable(self, req):
        assert not is_error_recoverable(req)
        assert not is_error_recoverable(reply(None, req, 1))
        assert not is_error_recoverable(None)

"""
Reply assembly and system-error classification.

``reply`` turns the outcome of a dispatched call into the matching reply
envelope. Replies copy token and session from the request and swap
``to``/``from``; a request with no usable meta block still gets a reply,
addressed with the default meta below.
"""

from collections.abc import Mapping
from typing import Any, Optional

from caf_rpc.envelope import (
    DEFAULT_FROM,
    DEFAULT_REQUEST_ID,
    DEFAULT_SESSION,
    DUMMY_TOKEN,
    SYSTEM_FROM,
    get_meta,
    get_system_error_code,
    get_system_error_data,
    is_system_error,
)
from caf_rpc.errors import AppError, InvalidMessageShape, SysError, UnknownErrorKind, wrap_cause
from caf_rpc.models.codes import ErrorCode, is_recoverable_code
from caf_rpc.models.envelope import AppReply, Envelope, ErrorObject, Meta, SystemErrorReply


def _reply_meta(request: Any) -> Meta:
    try:
        meta = get_meta(request)
    except InvalidMessageShape:
        meta = None
    if meta is None:
        # Bad request without a meta section.
        return Meta(token=DUMMY_TOKEN, session_id=DEFAULT_SESSION, to=DEFAULT_FROM, from_=SYSTEM_FROM)
    return Meta(token=meta.token, session_id=meta.session_id, to=meta.from_, from_=meta.to)


def _reply_id(request: Any) -> Any:
    if isinstance(request, Envelope):
        request_id = getattr(request, "id", None)
    elif isinstance(request, Mapping):
        request_id = request.get("id")
    else:
        request_id = None
    return request_id or DEFAULT_REQUEST_ID


def _app_reply(request: Any, error: Any, value: Any) -> AppReply:
    return AppReply(
        result=[_reply_meta(request), wrap_cause(request, error) if error else error, value],
        id=_reply_id(request),
    )


def make_system_error(request: Any, code: int, human_message: str, cause: Any = None) -> SystemErrorReply:
    """System error reply to ``request``. ``request`` may be None or malformed."""
    if cause is None:
        cause = Exception(human_message)
    error = ErrorObject(code=code, message=human_message, data=[_reply_meta(request), wrap_cause(request, cause)])
    return SystemErrorReply(error=error, id=_reply_id(request))


def reply(error: Any, request: Any = None, value: Any = None) -> Envelope:
    """Reply envelope for a call outcome.

    No error gives an AppReply carrying ``value``. A SysError gives a system
    error reply, an AppError an AppReply with the error in its error slot.
    Error replies are addressed from the error's originating message.
    """
    if not error:
        return _app_reply(request, None, value)
    if isinstance(error, SysError):
        return make_system_error(error.origin, error.code, error.human_message, error.wrapped)
    if isinstance(error, AppError):
        return _app_reply(error.origin, error.wrapped, None)
    raise UnknownErrorKind(error)


def _is_code(msg: Any, code: ErrorCode) -> bool:
    return is_system_error(msg) and get_system_error_code(msg) == code


def redirect(request: Any, human_message: str, cause: Any = None) -> Envelope:
    """Ask the caller to resend ``request`` elsewhere. Put ``remoteNode`` in ``cause``."""
    return reply(SysError(request, ErrorCode.FORCE_REDIRECT, human_message, cause))


def is_redirect(msg: Any) -> bool:
    return _is_code(msg, ErrorCode.FORCE_REDIRECT)


def redirect_destination(msg: Any) -> Optional[str]:
    data = get_system_error_data(msg) if is_redirect(msg) else None
    return data.get("remoteNode") if isinstance(data, Mapping) else None


def not_authenticated(request: Any, human_message: str, cause: Any = None) -> Envelope:
    """Ask the caller to authenticate. Put ``accountsURL`` in ``cause``."""
    return reply(SysError(request, ErrorCode.NOT_AUTHENTICATED, human_message, cause))


def is_not_authenticated(msg: Any) -> bool:
    return _is_code(msg, ErrorCode.NOT_AUTHENTICATED)


def accounts_url(msg: Any) -> Optional[str]:
    data = get_system_error_data(msg) if is_not_authenticated(msg) else None
    return data.get("accountsURL") if isinstance(data, Mapping) else None


def is_not_authorized(msg: Any) -> bool:
    return _is_code(msg, ErrorCode.NOT_AUTHORIZED)


def is_error_recoverable(msg: Any) -> bool:
    """True for system errors that are transient or node-specific, i.e. worth retrying elsewhere."""
    return is_system_error(msg) and is_recoverable_code(get_system_error_code(msg))

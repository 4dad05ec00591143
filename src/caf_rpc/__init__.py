"""
caf-rpc — CAF message envelopes on top of JSON-RPC 2.0.

Builds and recognizes requests, notifications and replies between CAs,
keeps application and system errors on separate channels, and dispatches
inbound requests to target objects.
"""

from caf_rpc.dispatch import MethodTable, call, call_async, resolve_method
from caf_rpc.envelope import (
    DEFAULT_FROM,
    DEFAULT_REQUEST_ID,
    DEFAULT_SESSION,
    DUMMY_TOKEN,
    SYSTEM_FROM,
    SYSTEM_TOKEN,
    decode,
    encode,
    get_app_reply_data,
    get_app_reply_error,
    get_from,
    get_meta,
    get_method_args,
    get_method_name,
    get_session_id,
    get_system_error_code,
    get_system_error_data,
    get_system_error_msg,
    get_to,
    get_token,
    is_app_reply,
    is_notification,
    is_request,
    is_system_error,
    make_notification,
    make_request,
    message_kind,
    meta_freeze,
    parse_envelope,
    patch_meta,
    set_from,
    set_meta,
    set_session_id,
    set_to,
    set_token,
    system_request,
    to_wire,
)
from caf_rpc.errors import (
    AppError,
    CAError,
    CAFRpcError,
    ErrorKind,
    InvalidMessageShape,
    InvalidName,
    SealedEnvelopeError,
    SysError,
    UnknownErrorKind,
    new_app_error,
    new_sys_error,
    to_error_object,
)
from caf_rpc.ids import random_id
from caf_rpc.models.codes import RECOVERABLE_CODES, ErrorCode, is_recoverable_code
from caf_rpc.models.envelope import (
    AppReply,
    Envelope,
    MessageKind,
    Meta,
    Notification,
    Request,
    RequestId,
    SystemErrorReply,
)
from caf_rpc.names import APP_SEPARATOR, NAME_SEPARATOR, join_name, join_name_array, split_name
from caf_rpc.replies import (
    accounts_url,
    is_error_recoverable,
    is_not_authenticated,
    is_not_authorized,
    is_redirect,
    make_system_error,
    not_authenticated,
    redirect,
    redirect_destination,
    reply,
)

__version__ = "0.1.0"
__all__ = [
    "APP_SEPARATOR",
    "AppError",
    "AppReply",
    "CAError",
    "CAFRpcError",
    "DEFAULT_FROM",
    "DEFAULT_REQUEST_ID",
    "DEFAULT_SESSION",
    "DUMMY_TOKEN",
    "Envelope",
    "ErrorCode",
    "ErrorKind",
    "InvalidMessageShape",
    "InvalidName",
    "MessageKind",
    "Meta",
    "MethodTable",
    "NAME_SEPARATOR",
    "Notification",
    "RECOVERABLE_CODES",
    "Request",
    "RequestId",
    "SYSTEM_FROM",
    "SYSTEM_TOKEN",
    "SealedEnvelopeError",
    "SysError",
    "SystemErrorReply",
    "UnknownErrorKind",
    "accounts_url",
    "call",
    "call_async",
    "decode",
    "encode",
    "get_app_reply_data",
    "get_app_reply_error",
    "get_from",
    "get_meta",
    "get_method_args",
    "get_method_name",
    "get_session_id",
    "get_system_error_code",
    "get_system_error_data",
    "get_system_error_msg",
    "get_to",
    "get_token",
    "is_app_reply",
    "is_error_recoverable",
    "is_not_authenticated",
    "is_not_authorized",
    "is_notification",
    "is_recoverable_code",
    "is_redirect",
    "is_request",
    "is_system_error",
    "join_name",
    "join_name_array",
    "make_notification",
    "make_request",
    "make_system_error",
    "message_kind",
    "meta_freeze",
    "new_app_error",
    "new_sys_error",
    "not_authenticated",
    "parse_envelope",
    "patch_meta",
    "random_id",
    "redirect",
    "redirect_destination",
    "reply",
    "resolve_method",
    "set_from",
    "set_meta",
    "set_session_id",
    "set_to",
    "set_token",
    "split_name",
    "system_request",
    "to_error_object",
    "to_wire",
]

"""
Envelope construction, shape recognition and meta-data access.

CAF uses a subset of JSON-RPC 2.0: arguments are always positional and
every request/notification carries an implicit first argument with the
meta-data block (token, sessionId, to, from). Replies carry the same block:

- application errors ride in ``result = [meta, error, value]``, never in the
  JSON-RPC error object;
- system errors use the JSON-RPC error object with ``data = [meta, extra]``.

Use the accessors below instead of indexing into payloads.
"""

import json
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, Optional, Union

from pydantic import ValidationError

from caf_rpc.errors import InvalidMessageShape, SealedEnvelopeError
from caf_rpc.ids import random_id
from caf_rpc.models.envelope import (
    JSONRPC_VERSION,
    MODELS,
    Envelope,
    Message,
    MessageKind,
    Meta,
    Notification,
    Request,
    RequestId,
)

# Source of requests from entities without a proper id.
DEFAULT_FROM_ID = "UNKNOWN"
DEFAULT_FROM_USERNAME = NOBODY = "NOBODY"
DEFAULT_FROM = f"{DEFAULT_FROM_USERNAME}-{DEFAULT_FROM_ID}"
DEFAULT_SESSION = "default"
# Reply id when the request had none.
DEFAULT_REQUEST_ID = 42
DUMMY_TOKEN = "INVALID"

# Reserved identity for internal, local sessions.
SYSTEM_SESSION_ID = DEFAULT_SESSION
SYSTEM_FROM_ID = "sys1"
SYSTEM_USERNAME = "!SYSTEM"
SYSTEM_FROM = f"{SYSTEM_USERNAME}-{SYSTEM_FROM_ID}"
SYSTEM_TOKEN = DUMMY_TOKEN

_CALL_KINDS = (MessageKind.REQUEST, MessageKind.NOTIFICATION)


# --- builders ---


def make_notification(to: str, from_: str, session_id: str, method: str, *args: Any) -> Notification:
    meta = Meta(session_id=session_id, to=to, from_=from_)
    return Notification(method=method, params=[meta, *args])


def make_request(
    token: str,
    to: str,
    from_: str,
    session_id: str,
    method: str,
    *args: Any,
    request_id: Optional[RequestId] = None,
) -> Request:
    meta = Meta(token=token, session_id=session_id, to=to, from_=from_)
    return Request(method=method, params=[meta, *args], id=request_id or random_id())


def system_request(to: str, method: str, *args: Any) -> Request:
    """Request issued by the local system identity."""
    return make_request(SYSTEM_TOKEN, to, SYSTEM_FROM, SYSTEM_SESSION_ID, method, *args)


# --- shape recognition ---


def _is_seq(value: Any, size: Optional[int] = None) -> bool:
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        return False
    return len(value) > 0 if size is None else len(value) == size


def _classify_raw(raw: Mapping[str, Any]) -> Optional[MessageKind]:
    if raw.get("jsonrpc") != JSONRPC_VERSION:
        return None
    if raw.get("method") and _is_seq(raw.get("params")):
        return MessageKind.REQUEST if raw.get("id") else MessageKind.NOTIFICATION
    if _is_seq(raw.get("result"), 3) and raw.get("id"):
        return MessageKind.APP_REPLY
    error = raw.get("error")
    if isinstance(error, Mapping) and error.get("code") and _is_seq(error.get("data"), 2) and raw.get("id"):
        return MessageKind.SYSTEM_ERROR
    return None


def message_kind(msg: Any) -> Optional[MessageKind]:
    """Which of the four shapes ``msg`` has. Accepts models and decoded JSON mappings."""
    if isinstance(msg, Envelope):
        return msg.kind()
    if isinstance(msg, Mapping):
        return _classify_raw(msg)
    return None


def is_notification(msg: Any) -> bool:
    return message_kind(msg) is MessageKind.NOTIFICATION


def is_request(msg: Any) -> bool:
    return message_kind(msg) is MessageKind.REQUEST


def is_app_reply(msg: Any) -> bool:
    return message_kind(msg) is MessageKind.APP_REPLY


def is_system_error(msg: Any) -> bool:
    return message_kind(msg) is MessageKind.SYSTEM_ERROR


# --- wire codec ---


def parse_envelope(raw: Any) -> Message:
    """Validate a decoded JSON message into its envelope model."""
    if isinstance(raw, Envelope):
        if raw.kind() is None:
            raise InvalidMessageShape("Envelope out of shape", raw)
        return raw
    kind = message_kind(raw)
    if kind is None:
        raise InvalidMessageShape("Not a CAF message", raw)
    try:
        return MODELS[kind].model_validate(raw)
    except ValidationError as e:
        raise InvalidMessageShape(f"Invalid {kind.value}: {e}", raw) from e


def decode(text: Union[str, bytes]) -> Message:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidMessageShape(f"Invalid JSON: {e}", text) from e
    return parse_envelope(raw)


def to_wire(msg: Any) -> dict[str, Any]:
    return parse_envelope(msg).to_wire()


def encode(msg: Any) -> str:
    # Wrapped causes may carry values json can't represent; keep their repr.
    return json.dumps(to_wire(msg), default=str)


# --- meta-data ---
#
# Accessors take envelope models and decoded JSON mappings alike. On a
# mapping they read and write the wire dict in place; get_meta returns a
# validated copy of its meta block.


def _payload_slot(msg: Any, action: str) -> tuple[Any, str]:
    kind = message_kind(msg)
    if kind is None:
        raise InvalidMessageShape(f"{action}: badly formatted msg", msg)
    if isinstance(msg, Envelope):
        return msg.payload_slot()
    if kind is MessageKind.SYSTEM_ERROR:
        return msg["error"], "data"
    return msg, "params" if kind in _CALL_KINDS else "result"


def _field(owner: Any, name: str) -> Any:
    return owner[name] if isinstance(owner, Mapping) else getattr(owner, name)


def _writable_payload(msg: Any, action: str) -> Any:
    container = _field(*_payload_slot(msg, action))
    if isinstance(container, tuple) or (isinstance(msg, Envelope) and msg.sealed):
        raise SealedEnvelopeError(f"{action}: envelope is sealed")
    return container


def get_meta(msg: Any) -> Optional[Meta]:
    """Meta block of ``msg``; None if the slot holds something else."""
    meta = _field(*_payload_slot(msg, "No meta in msg"))[0]
    if isinstance(meta, Meta):
        return meta
    if isinstance(meta, Mapping):
        try:
            return Meta.model_validate(dict(meta))
        except ValidationError:
            return None
    return None


def set_meta(msg: Any, meta: Union[Meta, Mapping[str, Any]]) -> None:
    container = _writable_payload(msg, "Setting metadata")
    if isinstance(msg, Envelope):
        container[0] = meta if isinstance(meta, Meta) else Meta.model_validate(meta)
    else:
        container[0] = meta.to_wire() if isinstance(meta, Meta) else dict(meta)


def patch_meta(msg: Any, data: Optional[Mapping[str, Any]] = None) -> None:
    """Merge ``data`` (wire key names) into the meta block."""
    if isinstance(msg, Envelope):
        meta = get_meta(msg)
        merged = meta.to_wire() if meta is not None else {}
        merged.update(data or {})
        set_meta(msg, Meta.model_validate(merged))
        return
    container = _writable_payload(msg, "Patching metadata")
    merged = dict(container[0]) if isinstance(container[0], Mapping) else {}
    merged.update(data or {})
    container[0] = merged


def _update_meta(msg: Any, **fields: Any) -> None:
    if not isinstance(msg, Envelope):
        patch_meta(msg, {Meta.model_fields[name].alias or name: value for name, value in fields.items()})
        return
    meta = get_meta(msg)
    if meta is None:
        meta = Meta()
        set_meta(msg, meta)
    for name, value in fields.items():
        setattr(meta, name, value)


def get_token(msg: Any) -> Optional[str]:
    meta = get_meta(msg)
    return meta.token if meta is not None else None


def get_session_id(msg: Any) -> Optional[str]:
    meta = get_meta(msg)
    return meta.session_id if meta is not None else None


def get_to(msg: Any) -> Optional[str]:
    meta = get_meta(msg)
    return meta.to if meta is not None else None


def get_from(msg: Any) -> Optional[str]:
    meta = get_meta(msg)
    return meta.from_ if meta is not None else None


def set_token(msg: Any, token: str) -> None:
    _update_meta(msg, token=token)


def set_session_id(msg: Any, session_id: str) -> None:
    _update_meta(msg, session_id=session_id)


def set_to(msg: Any, to: str) -> None:
    _update_meta(msg, to=to)


def set_from(msg: Any, from_: str) -> None:
    _update_meta(msg, from_=from_)


def meta_freeze(msg: Any) -> None:
    """Seal the envelope, its payload container and meta. Further meta writes raise.

    A decoded mapping is frozen in place: its payload list becomes a tuple and
    a meta dict becomes a read-only mapping.
    """
    owner, name = _payload_slot(msg, "Freezing")
    if isinstance(msg, Envelope):
        msg.seal()
        return
    container = tuple(owner[name])
    if isinstance(container[0], Mapping):
        container = (MappingProxyType(dict(container[0])), *container[1:])
    owner[name] = container


# --- payload ---


def get_method_name(msg: Any) -> str:
    if message_kind(msg) not in _CALL_KINDS:
        raise InvalidMessageShape("Invalid msg", msg)
    return _field(msg, "method")


def get_method_args(msg: Any) -> list[Any]:
    if message_kind(msg) not in _CALL_KINDS:
        raise InvalidMessageShape("Invalid msg", msg)
    return list(_field(msg, "params")[1:])


def get_app_reply_error(msg: Any) -> Any:
    return _field(msg, "result")[1] if is_app_reply(msg) else None


def get_app_reply_data(msg: Any) -> Any:
    return _field(msg, "result")[2] if is_app_reply(msg) else None


def get_system_error_data(msg: Any) -> Any:
    return _field(_field(msg, "error"), "data")[1] if is_system_error(msg) else None


def get_system_error_code(msg: Any) -> Optional[int]:
    return _field(_field(msg, "error"), "code") if is_system_error(msg) else None


def get_system_error_msg(msg: Any) -> Optional[str]:
    return _field(_field(msg, "error"), "message") if is_system_error(msg) else None

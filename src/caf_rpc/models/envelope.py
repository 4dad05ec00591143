"""
Envelope models — the four CAF message shapes on top of JSON-RPC 2.0.

Every message embeds a meta-data block as element 0 of its payload
container:

    Notification      {method, params: [meta, *args]}
    Request           Notification + {id}
    AppReply          {result: [meta, error, value], id}
    SystemErrorReply  {error: {code, message, data: [meta, extra]}, id}

Models start MUTABLE. ``seal()`` moves them to SEALED: the payload container
becomes a tuple and the envelope, error object and meta reject assignment.
"""

import enum
from collections.abc import Mapping
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from caf_rpc.errors import SealedEnvelopeError

JSONRPC_VERSION = "2.0"

# JSON-RPC discourages fractional ids but allows them; they are kept as sent.
RequestId = Union[str, int, float]


class MessageKind(str, enum.Enum):
    NOTIFICATION = "notification"
    REQUEST = "request"
    APP_REPLY = "app_reply"
    SYSTEM_ERROR = "system_error"


class SealState(enum.Enum):
    MUTABLE = "mutable"
    SEALED = "sealed"


class _Sealable(BaseModel):
    _state: SealState = PrivateAttr(default=SealState.MUTABLE)

    @property
    def sealed(self) -> bool:
        return self._state is SealState.SEALED

    def _seal(self) -> None:
        if not self.sealed:
            self._state = SealState.SEALED

    def __setattr__(self, name: str, value: Any) -> None:
        if self.sealed:
            raise SealedEnvelopeError(f"cannot set {name!r} on a sealed {type(self).__name__}")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if self.sealed:
            raise SealedEnvelopeError(f"cannot delete {name!r} on a sealed {type(self).__name__}")
        super().__delattr__(name)


class Meta(_Sealable):
    """Routing and auth block: who is calling whom, in which session, with which token."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    token: Optional[str] = None
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    to: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def _coerce_meta(container: list[Any]) -> list[Any]:
    if container and isinstance(container[0], Mapping):
        return [Meta.model_validate(dict(container[0])), *container[1:]]
    return container


def _non_empty_id(value: RequestId) -> RequestId:
    if not value:
        raise ValueError("id must be non-empty")
    return value


def plain(value: Any) -> Any:
    """Recursively convert models inside a payload to JSON-ready data."""
    if isinstance(value, (Meta, Envelope)):
        return value.to_wire()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Mapping):
        return {k: plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain(v) for v in value]
    return value


class Envelope(_Sealable):
    jsonrpc: Literal["2.0"] = JSONRPC_VERSION

    def kind(self) -> Optional[MessageKind]:
        """The variant this envelope currently satisfies, None if mutated out of shape."""
        raise NotImplementedError

    def payload_slot(self) -> tuple[BaseModel, str]:
        """(owner, field name) of the container holding meta at index 0."""
        raise NotImplementedError

    def payload(self) -> Union[list[Any], tuple[Any, ...]]:
        owner, name = self.payload_slot()
        return getattr(owner, name)

    def seal(self) -> None:
        """Freeze envelope, payload container and meta. Nothing deeper."""
        owner, name = self.payload_slot()
        container = tuple(getattr(owner, name))
        owner.__dict__[name] = container
        if container and isinstance(container[0], Meta):
            container[0]._seal()
        if owner is not self and isinstance(owner, _Sealable):
            owner._seal()
        self._seal()

    def to_wire(self) -> dict[str, Any]:
        raise NotImplementedError


class _Call(Envelope):
    method: str = Field(min_length=1)
    params: list[Any] = Field(min_length=1)

    @field_validator("params")
    @classmethod
    def _meta_first(cls, value: list[Any]) -> list[Any]:
        return _coerce_meta(value)

    def payload_slot(self) -> tuple[BaseModel, str]:
        return self, "params"

    def _wire_call(self) -> dict[str, Any]:
        return {"jsonrpc": self.jsonrpc, "method": self.method, "params": plain(self.params)}


class Notification(_Call):
    def kind(self) -> Optional[MessageKind]:
        if self.method and self.params:
            return MessageKind.NOTIFICATION
        return None

    def to_wire(self) -> dict[str, Any]:
        return self._wire_call()


class Request(_Call):
    """Call that expects a reply. ``id`` is a non-empty string or a non-zero number, fractions included."""

    id: RequestId

    @field_validator("id")
    @classmethod
    def _id_present(cls, value: RequestId) -> RequestId:
        return _non_empty_id(value)

    def kind(self) -> Optional[MessageKind]:
        if self.method and self.params and self.id:
            return MessageKind.REQUEST
        return None

    def to_wire(self) -> dict[str, Any]:
        wire = self._wire_call()
        wire["id"] = self.id
        return wire


class AppReply(Envelope):
    result: list[Any] = Field(min_length=3, max_length=3)
    id: RequestId

    @field_validator("result")
    @classmethod
    def _meta_first(cls, value: list[Any]) -> list[Any]:
        return _coerce_meta(value)

    @field_validator("id")
    @classmethod
    def _id_present(cls, value: RequestId) -> RequestId:
        return _non_empty_id(value)

    def kind(self) -> Optional[MessageKind]:
        if len(self.result) == 3 and self.id:
            return MessageKind.APP_REPLY
        return None

    def payload_slot(self) -> tuple[BaseModel, str]:
        return self, "result"

    def to_wire(self) -> dict[str, Any]:
        return {"jsonrpc": self.jsonrpc, "result": plain(self.result), "id": self.id}


class ErrorObject(_Sealable):
    code: int
    message: str = ""
    data: list[Any] = Field(min_length=2, max_length=2)

    @field_validator("data")
    @classmethod
    def _meta_first(cls, value: list[Any]) -> list[Any]:
        return _coerce_meta(value)

    @field_validator("code")
    @classmethod
    def _non_zero(cls, value: int) -> int:
        if not value:
            raise ValueError("error code must be non-zero")
        return value


class SystemErrorReply(Envelope):
    error: ErrorObject
    id: RequestId

    @field_validator("id")
    @classmethod
    def _id_present(cls, value: RequestId) -> RequestId:
        return _non_empty_id(value)

    def kind(self) -> Optional[MessageKind]:
        if self.error.code and len(self.error.data) == 2 and self.id:
            return MessageKind.SYSTEM_ERROR
        return None

    def payload_slot(self) -> tuple[BaseModel, str]:
        return self.error, "data"

    def to_wire(self) -> dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "error": {
                "code": self.error.code,
                "message": self.error.message,
                "data": plain(self.error.data),
            },
            "id": self.id,
        }


Message = Union[Notification, Request, AppReply, SystemErrorReply]

MODELS: dict[MessageKind, type[Envelope]] = {
    MessageKind.NOTIFICATION: Notification,
    MessageKind.REQUEST: Request,
    MessageKind.APP_REPLY: AppReply,
    MessageKind.SYSTEM_ERROR: SystemErrorReply,
}

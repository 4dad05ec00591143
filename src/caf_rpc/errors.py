"""
caf-rpc error types.

Two families live here:

- ``CAFRpcError`` and subclasses: raised when the library is misused
  (malformed envelopes, bad names, writes to a sealed message).
- ``CAError`` values (``SysError`` / ``AppError``): protocol failures handed
  to dispatch callbacks and turned into reply envelopes by
  ``caf_rpc.replies.reply``. They keep the originating message around for
  diagnostics and a plain-data copy of the underlying cause.
"""

import enum
import traceback
from collections.abc import Mapping
from typing import Any, ClassVar, Optional


class CAFRpcError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class InvalidMessageShape(CAFRpcError):
    def __init__(self, message: str, msg: Any = None):
        super().__init__("invalid_message_shape", message, {"msg": msg})
        self.msg = msg


class UnknownErrorKind(CAFRpcError):
    def __init__(self, error: Any):
        super().__init__("unknown_error_kind", f"not an App or System error: {error!r}", {"error": error})
        self.error = error


class InvalidName(CAFRpcError):
    def __init__(self, name: str):
        super().__init__("invalid_name", f"Invalid name: {name!r}", {"name": name})
        self.name = name


class SealedEnvelopeError(CAFRpcError):
    def __init__(self, message: str):
        super().__init__("sealed_envelope", message)


def to_error_object(err: Any) -> Any:
    """Shallow plain-data projection of a thrown value.

    Exceptions keep their type name, message, instance attributes and, when
    raised, the formatted stack. Mappings are copied. Anything else is
    returned as is.
    """
    if isinstance(err, BaseException):
        obj: dict[str, Any] = {"name": type(err).__name__, "message": str(err)}
        obj.update(vars(err))
        if err.__traceback__ is not None:
            obj["stack"] = "".join(traceback.format_exception(type(err), err, err.__traceback__))
        return obj
    if isinstance(err, Mapping):
        return dict(err)
    return err


def wrap_cause(origin: Any, cause: Any) -> Any:
    """Project ``cause`` to plain data and stamp it with the originating message."""
    wrapped = to_error_object(cause)
    if isinstance(wrapped, dict):
        wrapped["request"] = origin
    return wrapped


class ErrorKind(str, enum.Enum):
    SYSTEM = "SystemError"
    APP = "AppError"


class CAError(Exception):
    """Base for the two reply error channels."""

    kind: ClassVar[ErrorKind]

    def __init__(self, origin: Any, human_message: str, cause: Any = None):
        super().__init__(human_message)
        self.origin = origin
        self.human_message = human_message
        self.wrapped = wrap_cause(origin, cause)


class SysError(CAError):
    """Infrastructure failure. Travels in the JSON-RPC ``error`` object with a taxonomy code."""

    kind = ErrorKind.SYSTEM

    def __init__(self, origin: Any, code: int, human_message: str, cause: Any = None):
        if cause is None:
            cause = Exception(human_message)
        super().__init__(origin, human_message, cause)
        self.code = code

    def __repr__(self) -> str:
        return f"SysError(code={self.code!r}, human_message={self.human_message!r})"


class AppError(CAError):
    """Application failure. Travels in the error slot of the reply result, uncoded."""

    kind = ErrorKind.APP

    def __repr__(self) -> str:
        return f"AppError(human_message={self.human_message!r})"


def new_sys_error(origin: Any, code: int, human_message: str, cause: Any = None) -> SysError:
    return SysError(origin, code, human_message, cause)


def new_app_error(origin: Any, human_message: str, cause: Any) -> AppError:
    return AppError(origin, human_message, cause)

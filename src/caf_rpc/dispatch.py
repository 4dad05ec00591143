"""
Dispatch of inbound requests to a target CA.

``call`` validates the message, resolves the method on the target and
invokes it with the request arguments plus a completion callback. Every
failure reaches the caller's callback as a SysError or AppError, nothing
is raised. The target may complete later; ``call`` never waits for it.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any, Optional, Protocol, runtime_checkable

from caf_rpc.envelope import get_method_args, get_method_name, is_notification, is_request, parse_envelope
from caf_rpc.errors import AppError, CAError, InvalidMessageShape, SysError
from caf_rpc.models.codes import ErrorCode
from caf_rpc.models.envelope import Envelope

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[CAError], Any], None]

_SCALARS = (str, bytes, int, float, bool)


@runtime_checkable
class MethodTable(Protocol):
    """Target that resolves RPC method names itself."""

    def lookup_method(self, name: str) -> Optional[Callable[..., Any]]:
        ...


def resolve_method(target: Any, name: str) -> Optional[Callable[..., Any]]:
    """Callable exposed by ``target`` under ``name``, or None.

    Underscore names are never exposed through attribute lookup.
    """
    if isinstance(target, MethodTable):
        method = target.lookup_method(name)
    elif isinstance(target, Mapping):
        method = target.get(name)
    elif name.startswith("_"):
        method = None
    else:
        method = getattr(target, name, None)
    return method if callable(method) else None


def call(msg: Any, target: Any, callback: Callback) -> None:
    """Invoke the method named in ``msg`` on ``target``.

    ``callback(error, value)`` fires once: with a SysError when the call
    could not be made or the method raised, with an AppError when the method
    reported a failure, else with ``error=None`` and the method's value.
    """
    if isinstance(msg, Mapping):
        try:
            msg = parse_envelope(msg)
        except InvalidMessageShape as e:
            logger.debug(f"Rejected message: {e}")
    if target is None or isinstance(target, _SCALARS):
        callback(SysError(msg, ErrorCode.NO_SUCH_CA, "CA not found"), None)
        return
    # A mapping still here failed validation.
    if not isinstance(msg, Envelope) or not (is_request(msg) or is_notification(msg)):
        callback(SysError(msg, ErrorCode.INVALID_REQUEST, "Invalid request"), None)
        return
    method_name = get_method_name(msg)
    method = resolve_method(target, method_name)
    if method is None:
        logger.debug(f"No method {method_name!r} on {type(target).__name__}")
        callback(SysError(msg, ErrorCode.METHOD_NOT_FOUND, "method not found"), None)
        return

    replied = False

    def completion(err: Any = None, data: Any = None) -> None:
        nonlocal replied
        if replied:
            logger.warning(f"Duplicate completion of {method_name!r} ignored")
            return
        replied = True
        callback(AppError(msg, "AppError", err) if err else None, data)

    logger.debug(f"Dispatching {method_name!r} to {type(target).__name__}")
    try:
        method(*get_method_args(msg), completion)
    except Exception as e:
        if replied:
            logger.warning(f"Exception in {method_name!r} after it completed", exc_info=True)
            return
        replied = True
        logger.warning(f"Exception in application code calling {method_name!r}: {e}")
        callback(SysError(msg, ErrorCode.EXCEPTION_THROWN, "Exception in application code", e), None)


async def call_async(msg: Any, target: Any) -> Any:
    """Await ``call``. Returns the method's value or raises the SysError/AppError.

    The target may complete from any thread.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def settle(err: Optional[CAError], data: Any) -> None:
        if future.done():
            return
        if err is not None:
            future.set_exception(err)
        else:
            future.set_result(data)

    def done(err: Optional[CAError], data: Any = None) -> None:
        loop.call_soon_threadsafe(settle, err, data)

    call(msg, target, done)
    return await future

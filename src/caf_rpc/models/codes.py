"""
System error taxonomy.

Standard JSON-RPC codes plus the -32000..-32099 server range used by CAs.
"""

import enum
from typing import Any


class ErrorCode(enum.IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    NO_SUCH_CA = -32000
    SHUTDOWN_CA = -32001
    CHECKPOINT_FAILURE = -32002
    PREPARE_FAILURE = -32003
    EXCEPTION_THROWN = -32004
    COMMIT_FAILURE = -32005
    FORCE_REDIRECT = -32006
    NOT_AUTHORIZED = -32007
    BEGIN_FAILURE = -32008
    NOT_AUTHENTICATED = -32009


# Transient or node-specific failures, safe to retry on another node/session.
RECOVERABLE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.NO_SUCH_CA,
    ErrorCode.SHUTDOWN_CA,
    ErrorCode.CHECKPOINT_FAILURE,
    ErrorCode.PREPARE_FAILURE,
    ErrorCode.COMMIT_FAILURE,
    ErrorCode.BEGIN_FAILURE,
    ErrorCode.INTERNAL_ERROR,
})


def is_recoverable_code(code: Any) -> bool:
    return code in RECOVERABLE_CODES


def code_name(code: int) -> str:
    """Symbolic name for a code, or the number itself when it is not in the taxonomy."""
    try:
        return ErrorCode(code).name
    except ValueError:
        return str(code)

"""Classification of outbound call failures."""

import errno
import socket
from collections.abc import Iterator
from enum import Enum

import httpx


class FailureKind(Enum):
    """Closed set of failure kinds with their caller-facing status and code."""

    HOST_NOT_FOUND = (404, "ENOTFOUND", "Host not found")
    CONNECTION_REFUSED = (502, "ECONNREFUSED", "Connection refused")
    TIMEOUT = (504, "ETIMEDOUT", "Request timeout")
    INVALID_JSON = (502, "EINVALIDJSON", "Invalid JSON from upstream")
    UNKNOWN = (500, "UNKNOWN", None)

    def __init__(self, status: int, code: str, prefix: str | None) -> None:
        self.status = status
        self.code = code
        self.prefix = prefix

    def describe(self, message: str) -> str:
        """Render the caller-facing error message."""
        if self.prefix is None:
            return message
        return f"{self.prefix}: {message}"


def classify_transport_error(exc: BaseException) -> tuple[FailureKind, str]:
    """Map a transport exception to a failure kind and caller-facing code.

    The exception's cause/context chain is searched, since httpx wraps the
    OS-level error (``socket.gaierror``, ``ConnectionRefusedError``) a couple
    of layers down.
    """
    chain = list(_walk(exc))

    if any(isinstance(e, (httpx.TimeoutException, TimeoutError)) for e in chain):
        return FailureKind.TIMEOUT, FailureKind.TIMEOUT.code
    if any(isinstance(e, socket.gaierror) for e in chain):
        return FailureKind.HOST_NOT_FOUND, FailureKind.HOST_NOT_FOUND.code
    if any(_is_refused(e) for e in chain):
        return FailureKind.CONNECTION_REFUSED, FailureKind.CONNECTION_REFUSED.code

    for e in chain:
        if isinstance(e, OSError) and e.errno in errno.errorcode:
            return FailureKind.UNKNOWN, errno.errorcode[e.errno]
    return FailureKind.UNKNOWN, FailureKind.UNKNOWN.code


def _is_refused(exc: BaseException) -> bool:
    if isinstance(exc, ConnectionRefusedError):
        return True
    return isinstance(exc, OSError) and exc.errno == errno.ECONNREFUSED


def _walk(exc: BaseException) -> Iterator[BaseException]:
    """Yield the exception, its causes and contexts, and group members."""
    pending = [exc]
    seen: set[int] = set()
    while pending:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        if isinstance(current, BaseExceptionGroup):
            pending.extend(current.exceptions)
        if current.__cause__ is not None:
            pending.append(current.__cause__)
        if current.__context__ is not None:
            pending.append(current.__context__)

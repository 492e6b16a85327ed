# Make the top-level packages (api, core, services, ui) and modules (app, cli)
# importable when running pytest from a plain checkout.
import itertools
import os
import socket
import sys

import httpx
import pytest

SERVICE_ROOT = os.path.dirname(__file__)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)


class RecordingObserver:
    """Collects observer callbacks for assertions."""

    def __init__(self):
        self.events = []

    def on_request(self, request):
        self.events.append(("request", request.method, request.url))

    def on_response(self, request, status, duration_ms):
        self.events.append(("response", request.method, request.url, status))

    def on_error(self, method, url, status, code, message):
        self.events.append(("error", method, url, status, code))


def connect_error(request: httpx.Request, cause: BaseException) -> httpx.ConnectError:
    """Build the ConnectError httpx raises for an OS-level failure."""
    exc = httpx.ConnectError(str(cause), request=request)
    exc.__cause__ = cause
    return exc


def dns_failure(request: httpx.Request) -> httpx.ConnectError:
    return connect_error(request, socket.gaierror(socket.EAI_NONAME, "Name or service not known"))


def refused_failure(request: httpx.Request) -> httpx.ConnectError:
    return connect_error(request, ConnectionRefusedError(111, "Connection refused"))


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def clock():
    """Deterministic millisecond clock advancing 5ms per reading."""
    return itertools.count(1_700_000_000_000, 5).__next__

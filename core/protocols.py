"""Shared protocol definitions."""

from typing import Protocol

from core.request_types import ProxyRequest


class RequestObserver(Protocol):
    """Protocol for request logging (Dashboard, console logger)."""

    def on_request(self, request: ProxyRequest) -> None: ...
    def on_response(self, request: ProxyRequest, status: int, duration_ms: int) -> None: ...
    def on_error(
        self,
        method: str,
        url: str | None,
        status: int,
        code: str,
        message: str,
    ) -> None: ...


class NullObserver:
    """Observer that ignores every event."""

    def on_request(self, request: ProxyRequest) -> None:
        pass

    def on_response(self, request: ProxyRequest, status: int, duration_ms: int) -> None:
        pass

    def on_error(
        self,
        method: str,
        url: str | None,
        status: int,
        code: str,
        message: str,
    ) -> None:
        pass

"""Shared request data types."""

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

BODYLESS_METHODS = frozenset({"GET", "HEAD"})


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class Timing:
    """Start/end timestamps of one proxied call, in epoch milliseconds."""

    start: int
    end: int

    @property
    def duration(self) -> str:
        return f"{self.end - self.start}ms"

    @property
    def duration_ms(self) -> int:
        return self.end - self.start

    def as_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end, "duration": self.duration}


@dataclass(frozen=True)
class ProxyRequest:
    """Normalized description of the call the client wants performed."""

    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    timeout_ms: int = 30000

    @property
    def allows_body(self) -> bool:
        return self.method not in BODYLESS_METHODS


@dataclass(frozen=True)
class OutboundRequest:
    """Prepared data for the upstream request."""

    method: str
    url: str
    headers: Mapping[str, str]
    content: bytes | None
    timeout_ms: int


@dataclass(frozen=True)
class UpstreamResult:
    """Raw upstream response, body fully read."""

    status: int
    status_text: str
    headers: list[tuple[str, str]]
    content: bytes
    content_type: str
    encoding: str
    timing: Timing


@dataclass(frozen=True)
class ProxyOutcome:
    """Outward HTTP status and JSON body for one inbound request."""

    status_code: int
    body: dict[str, Any]

"""Validation and shaping of inbound proxy requests."""

import math
import re
from collections.abc import Mapping
from typing import Any

import httpx

from core.exceptions import RequestValidationError
from core.request_types import ProxyRequest

URL_HINT = 'Send { "url": "https://api.example.com/endpoint" }'
URL_FORMAT_HINT = "URL must start with http:// or https://"
QUERY_HINT = "/proxy?url=https://api.example.com/data"

ALLOWED_SCHEMES = ("http", "https")
_METHOD_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


class RequestNormalizer:
    """Turn a raw proxy payload into a ProxyRequest, or reject it."""

    def __init__(self, default_timeout_ms: int = 30000, max_timeout_ms: int | None = None):
        self.default_timeout_ms = default_timeout_ms
        self.max_timeout_ms = max_timeout_ms

    def normalize(self, payload: Any) -> ProxyRequest:
        """Validate a POST-style payload.

        Raises:
            RequestValidationError: the payload cannot be dispatched
        """
        if not isinstance(payload, Mapping):
            raise RequestValidationError(
                "Request body must be a JSON object",
                code="INVALID_REQUEST",
                hint=URL_HINT,
            )

        url = self.validate_url(payload.get("url"))
        method = self._method(payload.get("method"))
        headers = self._headers(payload.get("headers"))
        timeout = payload.get("timeoutMs", payload.get("timeout"))

        return ProxyRequest(
            url=url,
            method=method,
            headers=headers,
            body=payload.get("body"),
            timeout_ms=self._timeout(timeout),
        )

    def from_query(self, url: str | None) -> ProxyRequest:
        """Validate a GET-style invocation carrying only a target URL."""
        if not url:
            raise RequestValidationError(
                "URL query parameter required",
                code="MISSING_URL",
                hint=QUERY_HINT,
            )
        return ProxyRequest(
            url=self.validate_url(url),
            timeout_ms=self._timeout(None),
        )

    def validate_url(self, url: Any) -> str:
        """Return the URL unchanged if it is an absolute http(s) URL."""
        if url is None or url == "":
            raise RequestValidationError("URL is required", code="MISSING_URL", hint=URL_HINT)
        if not isinstance(url, str) or not is_absolute_http_url(url):
            raise RequestValidationError(
                "Invalid URL format",
                code="INVALID_URL",
                hint=URL_FORMAT_HINT,
                url=str(url),
            )
        return url

    def _method(self, method: Any) -> str:
        if method is None:
            return "GET"
        if not isinstance(method, str) or not _METHOD_TOKEN.match(method):
            raise RequestValidationError(
                "Invalid HTTP method",
                code="INVALID_METHOD",
                hint='Use a standard verb such as "GET" or "POST"',
            )
        return method.upper()

    def _headers(self, headers: Any) -> dict[str, str]:
        if headers is None:
            return {}
        if not isinstance(headers, Mapping):
            raise RequestValidationError(
                "Headers must be an object",
                code="INVALID_HEADERS",
                hint='Send { "headers": { "Accept": "application/json" } }',
            )
        # null values mean "not set"
        return {str(key): str(value) for key, value in headers.items() if value is not None}

    def _timeout(self, timeout: Any) -> int:
        if timeout is None:
            value = self.default_timeout_ms
        elif (
            isinstance(timeout, bool)
            or not isinstance(timeout, (int, float))
            or not math.isfinite(timeout)
            or timeout <= 0
        ):
            raise RequestValidationError(
                "Timeout must be a positive number of milliseconds",
                code="INVALID_TIMEOUT",
                hint='Send { "timeoutMs": 30000 }',
            )
        else:
            value = int(timeout)
        if self.max_timeout_ms is not None:
            value = min(value, self.max_timeout_ms)
        return max(value, 1)


def is_absolute_http_url(url: str) -> bool:
    """Check that a string parses as an absolute http(s) URL with a host."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return False
    return parsed.scheme in ALLOWED_SCHEMES and bool(parsed.host)

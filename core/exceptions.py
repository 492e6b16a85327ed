"""Custom exception hierarchy for the API tester proxy."""

from core.failures import FailureKind


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class RequestValidationError(ProxyError):
    """Raised when a proxy request is rejected before any outbound call.

    Attributes:
        message: Error message shown to the caller
        code: Machine-readable code (e.g., 'MISSING_URL', 'INVALID_URL')
        hint: Description of the expected request shape (optional)
        url: The offending target URL, when it was the problem (optional)
    """

    def __init__(
        self,
        message: str,
        code: str,
        hint: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint
        self.url = url


class UpstreamError(ProxyError):
    """Raised when the outbound call fails.

    Attributes:
        kind: Classified failure kind
        message: Underlying error description
        code: Caller-facing error code, defaults to the kind's code
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code or kind.code


class ResponseDecodeError(UpstreamError):
    """Upstream declared a JSON body that does not parse."""

    def __init__(self, message: str) -> None:
        super().__init__(FailureKind.INVALID_JSON, message)


class RequestTooLarge(ProxyError):
    """Request body exceeds size limit."""


class InvalidJSON(ProxyError):
    """Request body is not valid JSON."""

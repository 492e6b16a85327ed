"""HTTP dispatch of outbound requests."""

import asyncio
from collections.abc import Callable

import httpx

from core.exceptions import UpstreamError
from core.failures import FailureKind, classify_transport_error
from core.request_types import OutboundRequest, Timing, UpstreamResult, now_ms


class UpstreamDispatcher:
    """Execute exactly one outbound call per request, under a hard deadline."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        follow_redirects: bool = True,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._client = client
        self._follow_redirects = follow_redirects
        self._clock = clock

    async def dispatch(
        self,
        outbound: OutboundRequest,
        started_at: int | None = None,
    ) -> UpstreamResult:
        """Send the request and read the whole response body.

        Raises:
            UpstreamError: classified transport failure (DNS, refused, timeout, other)
        """
        start = started_at if started_at is not None else self._clock()
        seconds = outbound.timeout_ms / 1000

        try:
            request = self._client.build_request(
                outbound.method,
                outbound.url,
                headers=dict(outbound.headers),
                content=outbound.content,
                timeout=seconds,
            )
        except (ValueError, TypeError) as e:
            # e.g. header values httpx cannot encode as ASCII
            raise UpstreamError(FailureKind.UNKNOWN, str(e) or type(e).__name__) from e

        try:
            # httpx timeouts are per phase; the scope bounds the whole exchange
            async with asyncio.timeout(seconds):
                response = await self._client.send(
                    request,
                    follow_redirects=self._follow_redirects,
                )
        except TimeoutError as e:
            raise UpstreamError(
                FailureKind.TIMEOUT,
                f"no response within {outbound.timeout_ms}ms",
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            kind, code = classify_transport_error(e)
            raise UpstreamError(kind, str(e) or type(e).__name__, code=code) from e

        return UpstreamResult(
            status=response.status_code,
            status_text=response.reason_phrase or httpx.codes.get_reason_phrase(response.status_code),
            headers=response.headers.multi_items(),
            content=response.content,
            content_type=response.headers.get("content-type", ""),
            encoding=response.encoding or "utf-8",
            timing=Timing(start, self._clock()),
        )

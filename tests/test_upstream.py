import asyncio
import json

import httpx
import pytest

from conftest import dns_failure, refused_failure
from core.exceptions import UpstreamError
from core.failures import FailureKind
from core.request_types import OutboundRequest
from services.upstream import UpstreamDispatcher


def outbound(method="GET", url="https://api.example.com/items", content=None, timeout_ms=1000, headers=None):
    return OutboundRequest(
        method=method,
        url=url,
        headers=headers or {"User-Agent": "API-Tester-Proxy/1.0"},
        content=content,
        timeout_ms=timeout_ms,
    )


def dispatcher_for(handler, clock=None) -> UpstreamDispatcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    if clock is None:
        return UpstreamDispatcher(client)
    return UpstreamDispatcher(client, clock=clock)


class TestUpstreamDispatcher:
    """Test cases for UpstreamDispatcher."""

    @pytest.mark.asyncio
    async def test_sends_request_as_described(self, clock):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                201,
                json={"ok": True},
                headers={"X-Upstream": "1"},
            )

        result = await dispatcher_for(handler, clock).dispatch(
            outbound(
                method="POST",
                content=b'{"a":1}',
                headers={"User-Agent": "API-Tester-Proxy/1.0", "Content-Type": "application/json"},
            )
        )

        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert seen[0].content == b'{"a":1}'
        assert seen[0].headers["user-agent"] == "API-Tester-Proxy/1.0"
        assert seen[0].headers["content-type"] == "application/json"

        assert result.status == 201
        assert result.status_text == "Created"
        assert json.loads(result.content) == {"ok": True}
        assert result.content_type == "application/json"
        assert ("x-upstream", "1") in result.headers
        assert result.timing.end - result.timing.start == 5

    @pytest.mark.asyncio
    async def test_started_at_is_used(self, clock):
        def handler(request):
            return httpx.Response(200, text="hi")

        result = await dispatcher_for(handler, clock).dispatch(outbound(), started_at=10)
        assert result.timing.start == 10

    @pytest.mark.asyncio
    async def test_dns_failure(self):
        def handler(request):
            raise dns_failure(request)

        with pytest.raises(UpstreamError) as exc_info:
            await dispatcher_for(handler).dispatch(outbound(url="https://nope.invalid"))

        assert exc_info.value.kind is FailureKind.HOST_NOT_FOUND
        assert exc_info.value.code == "ENOTFOUND"

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request):
            raise refused_failure(request)

        with pytest.raises(UpstreamError) as exc_info:
            await dispatcher_for(handler).dispatch(outbound(url="http://127.0.0.1:9"))

        assert exc_info.value.kind is FailureKind.CONNECTION_REFUSED

    @pytest.mark.asyncio
    async def test_transport_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamError) as exc_info:
            await dispatcher_for(handler).dispatch(outbound())

        assert exc_info.value.kind is FailureKind.TIMEOUT
        assert exc_info.value.code == "ETIMEDOUT"

    @pytest.mark.asyncio
    async def test_deadline_aborts_slow_upstream(self):
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200)

        with pytest.raises(UpstreamError) as exc_info:
            await dispatcher_for(handler).dispatch(outbound(timeout_ms=50))

        assert exc_info.value.kind is FailureKind.TIMEOUT
        assert "50ms" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_other_errors_fall_through(self):
        def handler(request):
            raise httpx.RemoteProtocolError("Server disconnected", request=request)

        with pytest.raises(UpstreamError) as exc_info:
            await dispatcher_for(handler).dispatch(outbound())

        assert exc_info.value.kind is FailureKind.UNKNOWN
        assert exc_info.value.code == "UNKNOWN"
        assert exc_info.value.message == "Server disconnected"

    @pytest.mark.asyncio
    async def test_single_attempt(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise refused_failure(request)

        with pytest.raises(UpstreamError):
            await dispatcher_for(handler).dispatch(outbound())
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(302, headers={"Location": "https://api.example.com/new"})
            return httpx.Response(200, text="moved here")

        result = await dispatcher_for(handler).dispatch(outbound(url="https://api.example.com/old"))
        assert result.status == 200
        assert result.content == b"moved here"

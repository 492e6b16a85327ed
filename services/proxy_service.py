"""Validate -> dispatch -> translate pipeline for proxy requests."""

from collections.abc import Callable
from typing import Any

from core.envelope import ResponseTranslator
from core.exceptions import RequestValidationError, UpstreamError
from core.normalize import RequestNormalizer
from core.protocols import NullObserver, RequestObserver
from core.request_types import ProxyOutcome, ProxyRequest, Timing, now_ms
from core.transform import RequestTransformer
from services.upstream import UpstreamDispatcher


class ProxyService:
    """Run one inbound proxy request through the pipeline.

    Every stage failure short-circuits to an envelope; nothing is retried and
    no state is kept between calls.
    """

    def __init__(
        self,
        normalizer: RequestNormalizer,
        transformer: RequestTransformer,
        dispatcher: UpstreamDispatcher,
        translator: ResponseTranslator,
        observer: RequestObserver | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._normalizer = normalizer
        self._transformer = transformer
        self._dispatcher = dispatcher
        self._translator = translator
        self._observer = observer or NullObserver()
        self._clock = clock

    async def handle(self, payload: Any) -> ProxyOutcome:
        """Handle a POST-style payload."""
        start = self._clock()
        try:
            request = self._normalizer.normalize(payload)
        except RequestValidationError as e:
            method = payload.get("method") if isinstance(payload, dict) else None
            return self._rejected(e, str(method or "GET"), start)
        return await self._forward(request, start)

    async def handle_query(self, url: str | None) -> ProxyOutcome:
        """Handle a GET-style invocation carrying only a target URL."""
        start = self._clock()
        try:
            request = self._normalizer.from_query(url)
        except RequestValidationError as e:
            return self._rejected(e, "GET", start)
        return await self._forward(request, start)

    async def _forward(self, request: ProxyRequest, start: int) -> ProxyOutcome:
        self._observer.on_request(request)
        outbound = self._transformer.build_outbound(request)

        try:
            result = await self._dispatcher.dispatch(outbound, started_at=start)
            status, body = self._translator.success(result)
        except UpstreamError as e:
            timing = Timing(start, self._clock())
            status, body = self._translator.failure(e, timing)
            self._observer.on_error(request.method, request.url, status, e.code, body["error"])
            return ProxyOutcome(status, body)

        self._observer.on_response(request, status, result.timing.duration_ms)
        return ProxyOutcome(status, body)

    def _rejected(self, error: RequestValidationError, method: str, start: int) -> ProxyOutcome:
        status, body = self._translator.validation_failure(error, Timing(start, self._clock()))
        self._observer.on_error(method, error.url, status, error.code, error.message)
        return ProxyOutcome(status, body)

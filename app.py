"""FastAPI application factory."""

import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.handlers import (
    VERSION,
    handle_health,
    handle_info,
    handle_not_found,
    handle_proxy,
    handle_proxy_query,
    handle_root,
    handle_server_error,
)
from api.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from core.config import Config
from core.envelope import ResponseTranslator
from core.headers import HeaderBuilder
from core.normalize import RequestNormalizer
from core.protocols import RequestObserver
from core.transform import RequestTransformer
from services.proxy_service import ProxyService
from services.upstream import UpstreamDispatcher


def create_app(
    config: Config,
    observer: RequestObserver,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        client = httpx.AsyncClient(limits=limits, transport=transport)
        app.state.proxy_service = ProxyService(
            normalizer=RequestNormalizer(
                default_timeout_ms=config.forward.default_timeout_ms,
                max_timeout_ms=config.forward.max_timeout_ms,
            ),
            transformer=RequestTransformer(HeaderBuilder(config.forward.user_agent)),
            dispatcher=UpstreamDispatcher(
                client,
                follow_redirects=config.forward.follow_redirects,
            ),
            translator=ResponseTranslator(),
            observer=observer,
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="API Tester Proxy", version=VERSION, lifespan=lifespan)
    app.state.started_at = time.monotonic()

    if config.rate_limit.enabled:
        app.add_middleware(RateLimitMiddleware, settings=config.rate_limit)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.allow_origins,
        allow_origin_regex=config.cors.allow_origin_regex,
        allow_methods=config.cors.allow_methods,
        allow_headers=config.cors.allow_headers,
        allow_credentials=config.cors.allow_credentials,
    )

    @app.get("/")
    async def root():
        return handle_root()

    @app.get("/health")
    async def health(request: Request):
        return handle_health(request)

    @app.get("/info")
    async def info():
        return handle_info(config)

    @app.post("/proxy")
    async def proxy(request: Request):
        return await handle_proxy(request, config)

    @app.get("/proxy")
    async def proxy_query(request: Request):
        return await handle_proxy_query(request)

    @app.exception_handler(404)
    async def not_found(request: Request, exc: Exception):
        return handle_not_found()

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        observer.on_error(request.method, str(request.url), 500, "INTERNAL", str(exc))
        return handle_server_error(exc)

    return app

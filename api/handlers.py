"""FastAPI route handlers."""

import json
import os
import platform
import time
from datetime import UTC, datetime
from json import JSONDecodeError
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from core.config import Config
from core.exceptions import InvalidJSON, RequestTooLarge
from core.request_types import ProxyOutcome

VERSION = "1.0.0"
AVAILABLE_ROUTES = ["/", "/health", "/info", "/proxy (POST)", "/proxy?url= (GET)"]


async def _parse_json_body(request: Request, max_body_size: int) -> Any:
    """Parse request body as JSON.

    Raises:
        RequestTooLarge: body exceeds max_body_size
        InvalidJSON: body is not valid JSON
    """
    raw_body = await request.body()
    if len(raw_body) > max_body_size:
        raise RequestTooLarge("Request body too large")

    text_body = raw_body.decode("utf-8", errors="replace")
    try:
        return json.loads(text_body)
    except (JSONDecodeError, ValueError) as e:
        raise InvalidJSON(f"Invalid JSON: {e}") from e


def _outcome_response(outcome: ProxyOutcome) -> JSONResponse:
    return JSONResponse(outcome.body, status_code=outcome.status_code)


async def handle_proxy(request: Request, config: Config) -> Response:
    """Handle POST /proxy."""
    try:
        payload = await _parse_json_body(request, config.limits.max_body_size)
    except RequestTooLarge as e:
        return JSONResponse({"error": str(e)}, status_code=413)
    except InvalidJSON as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    outcome = await request.app.state.proxy_service.handle(payload)
    return _outcome_response(outcome)


async def handle_proxy_query(request: Request) -> Response:
    """Handle GET /proxy?url=..."""
    outcome = await request.app.state.proxy_service.handle_query(request.query_params.get("url"))
    return _outcome_response(outcome)


def handle_root() -> dict[str, Any]:
    return {
        "status": "Proxy Server Running",
        "message": "CORS Proxy for API Testing",
        "version": VERSION,
        "endpoints": {
            "proxy": "/proxy (POST)",
            "health": "/health",
            "info": "/info",
        },
    }


def handle_health(request: Request) -> dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }


def handle_info(config: Config) -> dict[str, Any]:
    return {
        "server": "API Proxy",
        "version": VERSION,
        "port": config.proxy.port,
        "pythonVersion": platform.python_version(),
        "platform": platform.system().lower(),
        "pid": os.getpid(),
    }


def handle_not_found() -> JSONResponse:
    return JSONResponse(
        {"error": "Route not found", "available": AVAILABLE_ROUTES},
        status_code=404,
    )


def handle_server_error(exc: Exception) -> JSONResponse:
    return JSONResponse(
        {"error": "Internal server error", "message": str(exc)},
        status_code=500,
    )

"""FastAPI route handlers."""

import json
from json import JSONDecodeError
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from core.backend_store import BACKEND_URL_REQUIRED
from core.exceptions import ConfigurationError
from services.gateway import Gateway

MAX_CONFIG_BODY_SIZE = 64 * 1024  # 64KB


def success(data: dict[str, Any]) -> JSONResponse:
    return JSONResponse({"success": True, "data": data})


def failure(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"message": message}},
    )


async def _parse_json_body(request: Request) -> dict[str, Any] | None:
    """Parse request body as a JSON object, None when absent or invalid."""
    raw_body = await request.body()
    if not raw_body or len(raw_body) > MAX_CONFIG_BODY_SIZE:
        return None
    try:
        body = json.loads(raw_body.decode("utf-8", errors="replace"))
    except (JSONDecodeError, ValueError):
        return None
    return body if isinstance(body, dict) else None


def _gateway(request: Request) -> Gateway:
    return request.app.state.gateway


async def handle_get_backend(request: Request) -> JSONResponse:
    """Return the active backend origin; never fails."""
    gateway = _gateway(request)
    return success({"backendUrl": gateway.store.read()})


async def handle_set_backend(request: Request) -> JSONResponse:
    """Validate and store a new backend origin."""
    gateway = _gateway(request)
    body = await _parse_json_body(request)
    if body is None:
        return failure(BACKEND_URL_REQUIRED)

    try:
        backend_url = gateway.store.write(body.get("backendUrl"))
    except ConfigurationError as e:
        return failure(str(e))

    persisted = getattr(gateway.store, "persisted", True)
    gateway.logger.log_config_change(backend_url, persisted)
    data: dict[str, Any] = {"backendUrl": backend_url}
    if not persisted:
        data["persisted"] = False
    return success(data)


async def handle_proxy(request: Request) -> Response:
    """Forward /api/* and /health to the current backend origin."""
    return await _gateway(request).forward(request)

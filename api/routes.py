"""Shared gateway routes: config endpoint and proxied paths."""

from fastapi import APIRouter

from api.handlers import handle_get_backend, handle_proxy, handle_set_backend
from core.router import CONFIG_PATH

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def build_router() -> APIRouter:
    """Create the router every adapter registers ahead of its own routes."""
    router = APIRouter()

    router.add_api_route(CONFIG_PATH, handle_get_backend, methods=["GET"])
    router.add_api_route(CONFIG_PATH, handle_set_backend, methods=["POST"])

    for path in ("/api", "/api/{path:path}", "/health"):
        router.add_api_route(
            path,
            handle_proxy,
            methods=PROXY_METHODS,
            include_in_schema=False,
        )

    return router

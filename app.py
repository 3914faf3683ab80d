"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.routes import build_router
from services.gateway import Gateway
from ui.log_utils import write_cli_log

logger = logging.getLogger(__name__)


def create_gateway_app(gateway: Gateway, title: str = "Luo Gateway") -> FastAPI:
    """Create an app holding only the shared gateway routes."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await gateway.aclose()

    app = FastAPI(title=title, version="0.1.0", lifespan=lifespan)
    app.state.gateway = gateway
    app.include_router(build_router())
    install_error_handler(app)
    return app


def install_error_handler(app: FastAPI) -> None:
    """Map unhandled exceptions to the INTERNAL_ERROR envelope."""

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        write_cli_log("ERROR", str(exc)[:200], path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An internal server error occurred.",
                },
            },
        )

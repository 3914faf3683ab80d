"""Standalone server: gateway routes, static files and SPA fallback."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from api.routes import build_router
from app import install_error_handler
from core.config import Config
from core.protocols import BackendStore, RequestLogger
from services.gateway import Gateway


def create_app(
    config: Config,
    logger: RequestLogger,
    store: BackendStore | None = None,
    gateway: Gateway | None = None,
) -> FastAPI:
    """Create the production app serving the built UI in front of the gateway."""
    gateway = gateway or Gateway.from_config(config, logger, store)
    static_dir = Path(config.server.static_dir).expanduser().resolve()
    index_file = static_dir / "index.html"

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await gateway.aclose()

    app = FastAPI(title="Luo Gateway", version="0.1.0", lifespan=lifespan)
    app.state.gateway = gateway

    # Order matters: gateway routes first, then assets, then the SPA catch-all
    app.include_router(build_router())

    if static_dir.is_dir():
        app.mount("/assets", StaticFiles(directory=static_dir / "assets", check_dir=False), name="assets")

    if config.server.spa_fallback:

        @app.get("/{path:path}", include_in_schema=False)
        async def spa_fallback(path: str):
            candidate = (static_dir / path).resolve()
            if path and candidate.is_file() and candidate.is_relative_to(static_dir):
                return FileResponse(candidate)
            if index_file.is_file():
                return FileResponse(index_file)
            return JSONResponse(
                status_code=404,
                content={"success": False, "error": {"code": "NOT_FOUND", "message": "Frontend build not found."}},
            )

    install_error_handler(app)
    return app


def run(config: Config, logger: RequestLogger, store: BackendStore | None = None) -> None:
    """Serve the standalone app until interrupted."""
    import uvicorn

    app = create_app(config, logger, store)
    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    uvicorn.Server(uvicorn_config).run()

"""Development adapter: gateway middleware in front of any ASGI dev app."""

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app import create_gateway_app
from core.config import Config
from core.exceptions import ConfigurationError
from core.protocols import BackendStore, RequestLogger
from services.gateway import Gateway


class GatewayMiddleware:
    """Send /config/backend, /api/* and /health to the gateway, the rest to the wrapped app.

    The gateway resolves the backend per request, so switching the backend
    while the dev server runs takes effect on the next call.
    """

    def __init__(self, app: ASGIApp, gateway: Gateway) -> None:
        self.app = app
        self.gateway = gateway
        self.gateway_app = create_gateway_app(gateway, title="Luo Gateway (dev)")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and self.gateway.matcher.is_gateway_path(scope["path"]):
            await self.gateway_app(scope, receive, send)
            return

        if scope["type"] == "lifespan":
            await self.app(scope, receive, self._closing_send(send))
            return

        await self.app(scope, receive, send)

    def _closing_send(self, send: Send) -> Send:
        async def wrapped(message: Message) -> None:
            if message["type"] == "lifespan.shutdown.complete":
                await self.gateway.aclose()
            await send(message)

        return wrapped


def wrap_dev_app(
    app: ASGIApp,
    config: Config,
    logger: RequestLogger,
    store: BackendStore | None = None,
) -> GatewayMiddleware:
    """Wrap a development app with the shared gateway."""
    return GatewayMiddleware(app, Gateway.from_config(config, logger, store))


def load_dev_app(import_string: str) -> ASGIApp:
    """Import "module:attribute" as an ASGI app."""
    from uvicorn.importer import ImportFromStringError, import_from_string

    try:
        return import_from_string(import_string)
    except ImportFromStringError as e:
        raise ConfigurationError(str(e)) from e


def run_dev(import_string: str, config: Config, logger: RequestLogger) -> None:
    """Serve the wrapped dev app until interrupted."""
    import uvicorn

    app = wrap_dev_app(load_dev_app(import_string), config, logger)
    uvicorn_config = uvicorn.Config(
        app,
        host=config.dev.host,
        port=config.dev.port,
        log_level="info",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    uvicorn.Server(uvicorn_config).run()

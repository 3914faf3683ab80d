"""Shared gateway unit wired into every host adapter."""

import asyncio

import httpx
from fastapi import Request, Response

from core.backend_store import FileBackendStore
from core.config import Config, LimitSettings
from core.headers import HeaderBuilder
from core.protocols import BackendStore, RequestLogger
from core.request_types import ProxyRequest
from core.router import PathMatcher
from services.proxy_service import ForwardingProxy
from services.upstream import UpstreamClient, build_http_client


class Gateway:
    """Config endpoint state plus the forwarding proxy.

    The outbound client is created on first use so the gateway works in
    hosts that never run the app's lifespan (e.g. nested ASGI apps).
    """

    def __init__(
        self,
        store: BackendStore,
        logger: RequestLogger,
        limits: LimitSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.store = store
        self.logger = logger
        self.matcher = PathMatcher()
        self.proxy = ForwardingProxy(store, logger, HeaderBuilder())
        self._limits = limits or LimitSettings()
        self._transport = transport
        self._upstream: UpstreamClient | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls,
        config: Config,
        logger: RequestLogger,
        store: BackendStore | None = None,
    ) -> "Gateway":
        """Build a gateway whose store lives at the configured file location."""
        if store is None:
            store = FileBackendStore(
                config.backend_config_path(),
                default_url=config.backend.default_url,
                env_var=config.backend.env_var,
            )
        return cls(store, logger, limits=config.limits)

    async def ensure_client(self) -> UpstreamClient:
        if self._upstream is None:
            async with self._lock:
                if self._upstream is None:
                    self._upstream = UpstreamClient(
                        build_http_client(self._limits, transport=self._transport)
                    )
        return self._upstream

    async def forward(self, request: Request) -> Response:
        """Forward a framework request through the proxy."""
        upstream = await self.ensure_client()
        return await self.proxy.forward(to_proxy_request(request), upstream)

    async def aclose(self) -> None:
        if self._upstream is not None:
            await self._upstream.aclose()
            self._upstream = None


def to_proxy_request(request: Request) -> ProxyRequest:
    """Adapt a Starlette request, streaming the body only when one was sent."""
    has_body = (
        "content-length" in request.headers and request.headers["content-length"] != "0"
    ) or "transfer-encoding" in request.headers
    return ProxyRequest(
        method=request.method,
        path=request.url.path,
        query=request.url.query,
        # latin-1 decoded by Starlette, so the original bytes survive re-encoding
        headers=request.headers.items(),
        body=request.stream() if has_body else None,
        client_host=request.client.host if request.client else None,
        scheme=request.url.scheme,
    )

"""Forwarding orchestration for proxied requests."""

import logging
from collections.abc import AsyncIterator

import httpx
from fastapi import Response
from fastapi.responses import JSONResponse, StreamingResponse

from core.exceptions import UpstreamError
from core.headers import HeaderBuilder
from core.protocols import BackendStore, RequestLogger
from core.request_types import ProxyRequest
from services.upstream import UpstreamClient
from ui.log_utils import redact_headers

logger = logging.getLogger(__name__)

BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
BACKEND_UNAVAILABLE_MESSAGE = "Backend service is unavailable. Please try again later."


def backend_unavailable_response() -> JSONResponse:
    """The single 502 envelope returned for any upstream network failure."""
    return JSONResponse(
        status_code=502,
        content={
            "success": False,
            "error": {
                "code": BACKEND_UNAVAILABLE,
                "message": BACKEND_UNAVAILABLE_MESSAGE,
            },
        },
    )


class ForwardingProxy:
    """Relay requests to the backend origin the store reports right now."""

    def __init__(
        self,
        store: BackendStore,
        logger: RequestLogger,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._store = store
        self._logger = logger
        self._headers = header_builder or HeaderBuilder()

    async def forward(self, request: ProxyRequest, upstream: UpstreamClient) -> Response:
        """Forward one request; the target origin is resolved on every call."""
        target = self._store.read()
        url = target.rstrip("/") + request.path_qs()
        headers = self._headers.build_upstream_headers(request, target)
        self._logger.log_proxy(request.method, request.path_qs(), target)
        logger.debug("%s %s -> %s headers=%s", request.method, request.path, url, redact_headers(headers))

        try:
            response = await upstream.open(request.method, url, headers, request.body)
        except UpstreamError as e:
            logger.warning("Proxy error for %s %s: %s", request.method, url, e)
            self._logger.log_error(target, 502, str(e))
            return backend_unavailable_response()

        self._logger.log_response(request.method, request.path_qs(), response.status_code)
        return self._relay(response, target)

    def _relay(self, response: httpx.Response, target: str) -> StreamingResponse:
        relayed = StreamingResponse(self._stream(response, target), status_code=response.status_code)
        # Replace Starlette's defaults so headers match the backend byte-for-byte
        relayed.raw_headers = self._headers.build_downstream_headers(response.headers.raw)
        return relayed

    async def _stream(self, response: httpx.Response, target: str) -> AsyncIterator[bytes]:
        """Relay raw body bytes; a backend drop mid-body aborts the client connection."""
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        except httpx.HTTPError as e:
            logger.warning("Backend %s dropped the response mid-stream: %s", target, e)
            self._logger.log_error(target, response.status_code, f"Stream aborted: {e}")
            raise
        finally:
            await response.aclose()

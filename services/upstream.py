"""HTTP forwarding utilities for backend requests."""

import httpx

from core.config import LimitSettings
from core.exceptions import UpstreamConnectionError, UpstreamTimeoutError


def build_http_client(
    limits: LimitSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared outbound client.

    No base_url: the destination is resolved per request. Only the connect
    phase is bounded; reads wait for the backend.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(None, connect=limits.connect_timeout),
        limits=httpx.Limits(
            max_connections=limits.max_connections,
            max_keepalive_connections=limits.max_keepalive_connections,
        ),
        follow_redirects=False,
        # System proxy settings must not reroute traffic meant for the backend
        trust_env=False,
        transport=transport,
    )


class UpstreamClient:
    """Open streamed requests against whatever origin the caller resolved."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def open(
        self,
        method: str,
        url: str,
        headers: list[tuple[str, str]],
        body,
    ) -> httpx.Response:
        """Send the request and return once response headers have arrived.

        Header values travel as the bytes the client sent; the body is left
        unread and the caller must close the response.
        """
        raw_headers = [(key.encode("latin-1"), value.encode("latin-1")) for key, value in headers]
        try:
            request = self._client.build_request(method, url, headers=raw_headers, content=body)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as e:
            # httpx.URL rejects some malformed origins with a plain ValueError
            raise UpstreamConnectionError(f"Invalid backend URL: {e}", target=url) from e
        if request.url.scheme not in ("http", "https") or not request.url.host:
            raise UpstreamConnectionError(f"Invalid backend URL: {url}", target=url)

        try:
            return await self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Upstream timeout: {e!r}", target=url) from e
        except httpx.UnsupportedProtocol as e:
            raise UpstreamConnectionError(f"Invalid backend URL: {e}", target=url) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e!r}", target=url) from e

    async def aclose(self) -> None:
        await self._client.aclose()

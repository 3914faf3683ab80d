"""Tests for the outbound client and gateway lifecycle."""

import httpx
import pytest

from core.backend_store import MemoryBackendStore
from core.config import LimitSettings
from core.exceptions import UpstreamConnectionError, UpstreamTimeoutError
from services.gateway import Gateway
from services.upstream import UpstreamClient, build_http_client


def _client(handler) -> UpstreamClient:
    return UpstreamClient(build_http_client(LimitSettings(), transport=httpx.MockTransport(handler)))


class TestUpstreamClient:
    async def test_returns_streamed_response(self):
        upstream = _client(lambda request: httpx.Response(204))
        response = await upstream.open("GET", "http://backend:1/health", [], None)
        assert response.status_code == 204
        await response.aclose()
        await upstream.aclose()

    async def test_connect_error_mapped(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamConnectionError) as exc_info:
            await _client(refuse).open("GET", "http://backend:1/api/x", [], None)
        assert exc_info.value.target == "http://backend:1/api/x"

    async def test_timeout_mapped(self):
        def slow(request):
            raise httpx.ConnectTimeout("slow", request=request)

        with pytest.raises(UpstreamTimeoutError):
            await _client(slow).open("GET", "http://backend:1/api/x", [], None)

    @pytest.mark.parametrize("url", ["backend/api/x", "ftp://backend/api/x", "http:///api/x"])
    async def test_invalid_origin_rejected(self, url):
        with pytest.raises(UpstreamConnectionError):
            await _client(lambda request: httpx.Response(200)).open("GET", url, [], None)

    async def test_header_bytes_sent_unchanged(self):
        seen = []

        def record(request):
            seen.append(request)
            return httpx.Response(200)

        file_name = "报告.pdf".encode()
        upstream = _client(record)
        response = await upstream.open(
            "POST", "http://backend:1/api/upload", [("x-file-name", file_name.decode("latin-1"))], b"data"
        )
        assert response.status_code == 200
        assert (b"x-file-name", file_name) in seen[0].headers.raw
        await response.aclose()
        await upstream.aclose()

    def test_only_connect_timeout_set(self):
        client = build_http_client(LimitSettings(connect_timeout=3.0))
        assert client.timeout.connect == 3.0
        assert client.timeout.read is None


class TestGatewayLifecycle:
    async def test_client_created_lazily_and_closed(self, request_logger):
        gateway = Gateway(MemoryBackendStore(), request_logger, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        first = await gateway.ensure_client()
        assert await gateway.ensure_client() is first
        await gateway.aclose()
        assert await gateway.ensure_client() is not first
        await gateway.aclose()

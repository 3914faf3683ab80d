"""Tests for path matching and header construction."""

import pytest

from core.headers import HeaderBuilder
from core.request_types import ProxyRequest
from core.router import PathMatcher


def make_request(headers, client_host="192.0.2.10", scheme="http"):
    return ProxyRequest(
        method="GET",
        path="/api/messages",
        query="folder=inbox",
        headers=headers,
        body=None,
        client_host=client_host,
        scheme=scheme,
    )


class TestPathMatcher:
    @pytest.mark.parametrize(
        "path", ["/api", "/api/", "/api/accounts", "/api/emails/1/attachments/2", "/health"]
    )
    def test_proxied(self, path):
        assert PathMatcher().is_proxied(path)

    @pytest.mark.parametrize(
        "path", ["/", "/apiary", "/assets/logo.png", "/health/", "/healthz", "/config/backend", "/index.html"]
    )
    def test_not_proxied(self, path):
        assert not PathMatcher().is_proxied(path)

    def test_gateway_paths(self):
        matcher = PathMatcher()
        assert matcher.is_gateway_path("/config/backend")
        assert matcher.is_gateway_path("/api/x")
        assert not matcher.is_gateway_path("/config")


class TestHeaderBuilder:
    def test_hop_by_hop_dropped(self):
        request = make_request(
            [
                ("host", "localhost:3000"),
                ("connection", "keep-alive"),
                ("keep-alive", "timeout=5"),
                ("transfer-encoding", "chunked"),
                ("accept", "application/json"),
            ]
        )
        headers = dict(HeaderBuilder().build_upstream_headers(request, "http://10.0.0.5:9000"))
        assert "connection" not in headers
        assert "keep-alive" not in headers
        assert "transfer-encoding" not in headers
        assert headers["accept"] == "application/json"
        assert headers["host"] == "10.0.0.5:9000"

    def test_host_uses_target_netloc(self):
        request = make_request([("host", "localhost:3000")])
        headers = dict(HeaderBuilder().build_upstream_headers(request, "https://mail.example.com"))
        assert headers["host"] == "mail.example.com"
        assert headers["x-forwarded-host"] == "localhost:3000"

    def test_origin_from_frontend(self):
        request = make_request([("host", "localhost:3000")], scheme="https")
        headers = dict(HeaderBuilder().build_upstream_headers(request, "http://b:1"))
        assert headers["origin"] == "https://localhost:3000"
        assert headers["referer"] == "https://localhost:3000/"
        assert headers["x-forwarded-proto"] == "https"

    def test_no_origin_without_host(self):
        headers = dict(HeaderBuilder().build_upstream_headers(make_request([]), "http://b:1"))
        assert "origin" not in headers
        assert "referer" not in headers

    def test_forwarded_for_chain(self):
        request = make_request([("X-Forwarded-For", "198.51.100.1, 198.51.100.2")])
        headers = dict(HeaderBuilder().build_upstream_headers(request, "http://b:1"))
        assert headers["x-forwarded-for"] == "198.51.100.1, 198.51.100.2, 192.0.2.10"

    def test_existing_forwarded_proto_kept(self):
        request = make_request([("x-forwarded-proto", "https")])
        pairs = HeaderBuilder().build_upstream_headers(request, "http://b:1")
        assert [v for k, v in pairs if k.lower() == "x-forwarded-proto"] == ["https"]

    def test_downstream_strips_hop_by_hop(self):
        relayed = HeaderBuilder().build_downstream_headers(
            [
                (b"Content-Type", b"application/json"),
                (b"Transfer-Encoding", b"chunked"),
                (b"Connection", b"close"),
                (b"Set-Cookie", b"a=1"),
                (b"Set-Cookie", b"b=2"),
            ]
        )
        assert relayed == [
            (b"content-type", b"application/json"),
            (b"set-cookie", b"a=1"),
            (b"set-cookie", b"b=2"),
        ]

    def test_downstream_keeps_non_ascii_values(self):
        disposition = 'attachment; filename="报告.pdf"'.encode()
        relayed = HeaderBuilder().build_downstream_headers([(b"content-disposition", disposition)])
        assert relayed == [(b"content-disposition", disposition)]

    def test_path_qs(self):
        assert make_request([]).path_qs() == "/api/messages?folder=inbox"

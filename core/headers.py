"""Header construction for upstream requests and relayed responses."""

from urllib.parse import urlsplit

from core.request_types import ProxyRequest

HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


class HeaderBuilder:
    """Build outbound headers for the backend and relayed headers for the client."""

    def build_upstream_headers(
        self,
        request: ProxyRequest,
        target_origin: str,
    ) -> list[tuple[str, str]]:
        """Copy client headers, rewriting Host and adding forwarding headers."""
        upstream: list[tuple[str, str]] = []
        present: set[str] = set()
        forwarded_for: list[str] = []

        for key, value in request.headers:
            key_lower = key.lower()
            if key_lower in HOP_BY_HOP_HEADERS or key_lower == "host":
                continue
            if key_lower == "x-forwarded-for":
                forwarded_for.append(value)
                continue
            present.add(key_lower)
            upstream.append((key, value))

        upstream.insert(0, ("host", self.host_header(target_origin)))

        frontend_origin = self.frontend_origin(request)
        if frontend_origin:
            if "origin" not in present:
                upstream.append(("origin", frontend_origin))
            if "referer" not in present:
                upstream.append(("referer", frontend_origin + "/"))

        if request.client_host:
            forwarded_for.append(request.client_host)
        if forwarded_for:
            upstream.append(("x-forwarded-for", ", ".join(forwarded_for)))

        incoming_host = request.header("host")
        if incoming_host and "x-forwarded-host" not in present:
            upstream.append(("x-forwarded-host", incoming_host))
        if "x-forwarded-proto" not in present:
            upstream.append(("x-forwarded-proto", request.scheme))

        return upstream

    def build_downstream_headers(self, headers: list[tuple[bytes, bytes]]) -> list[tuple[bytes, bytes]]:
        """Relay raw backend response headers minus hop-by-hop ones."""
        return [
            (key.lower(), value)
            for key, value in headers
            if key.decode("latin-1").lower() not in HOP_BY_HOP_HEADERS
        ]

    @staticmethod
    def host_header(target_origin: str) -> str:
        """Host value for the backend; internationalized names are sent as IDNA."""
        netloc = urlsplit(target_origin).netloc
        try:
            return netloc.encode("idna").decode("ascii")
        except UnicodeError:
            return netloc

    @staticmethod
    def frontend_origin(request: ProxyRequest) -> str | None:
        """Origin the client used to reach the gateway, e.g. http://localhost:3000."""
        host = request.header("host")
        if not host:
            return None
        return f"{request.scheme}://{host}"

"""Shared request data types."""

from collections.abc import AsyncIterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ProxyRequest:
    """Incoming request as seen by the forwarding proxy."""

    method: str
    path: str
    query: str
    headers: list[tuple[str, str]]
    body: AsyncIterator[bytes] | None
    client_host: str | None
    scheme: str = "http"

    def path_qs(self) -> str:
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path

    def header(self, name: str) -> str | None:
        """Return the first header value matching name (case-insensitive)."""
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None

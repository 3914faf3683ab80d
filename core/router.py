"""Request matching logic - decides which paths the gateway owns."""

from dataclasses import dataclass

CONFIG_PATH = "/config/backend"


@dataclass(frozen=True)
class PathMatcher:
    """Match request paths against the proxied prefixes."""

    prefixes: tuple[str, ...] = ("/api",)
    exact: tuple[str, ...] = ("/health",)

    def is_proxied(self, path: str) -> bool:
        """Return True for /api, /api/... and /health."""
        if path in self.exact:
            return True
        return any(path == prefix or path.startswith(prefix + "/") for prefix in self.prefixes)

    def is_config(self, path: str) -> bool:
        return path == CONFIG_PATH

    def is_gateway_path(self, path: str) -> bool:
        """Return True when the gateway (config endpoint or proxy) handles the path."""
        return self.is_config(path) or self.is_proxied(path)

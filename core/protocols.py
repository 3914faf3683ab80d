"""Shared protocol definitions."""

from typing import Protocol


class BackendStore(Protocol):
    """Single source of truth for the active backend origin."""

    def read(self) -> str: ...
    def write(self, url: str) -> str: ...


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard, ConsoleLogger)."""

    def log_proxy(self, method: str, path: str, target: str) -> None: ...
    def log_response(self, method: str, path: str, status: int) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
    def log_config_change(self, backend_url: str, persisted: bool) -> None: ...

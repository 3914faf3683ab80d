"""Plain request logger for headless modes (embedded, dev, tests)."""

import logging

from ui.log_utils import write_cli_log

logger = logging.getLogger("gateway.requests")


class ConsoleLogger:
    """RequestLogger backed by stdlib logging and the CLI log file."""

    def __init__(self, write_file: bool = True) -> None:
        self._write_file = write_file

    def log_proxy(self, method: str, path: str, target: str) -> None:
        logger.info("[Proxy] %s %s -> %s%s", method, path, target.rstrip("/"), path)

    def log_response(self, method: str, path: str, status: int) -> None:
        logger.info("[Proxy] %s %s <- %s", method, path, status)

    def log_error(self, route: str, status: int, message: str) -> None:
        logger.error("[Proxy Error] %s %s: %s", route, status, message)
        if self._write_file:
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def log_config_change(self, backend_url: str, persisted: bool) -> None:
        logger.info("[Config] Backend URL set to %s (persisted=%s)", backend_url, persisted)
        if self._write_file:
            write_cli_log("CONFIG", "Backend URL changed", backend_url=backend_url, persisted=persisted)

"""Embedded adapter: the standalone app on a fixed local port in a background thread."""

import logging
import socket
import threading
import time

import uvicorn

from adapters.standalone import create_app
from core.backend_store import FileBackendStore
from core.config import BACKEND_CONFIG_NAME, Config, get_app_data_dir
from core.exceptions import ConfigurationError
from core.protocols import RequestLogger

logger = logging.getLogger(__name__)


def is_port_in_use(host: str, port: int) -> bool:
    """Check whether something already listens on host:port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError:
            return True


class EmbeddedServer:
    """In-process HTTP listener a desktop shell points its window at."""

    def __init__(self, config: Config, logger: RequestLogger) -> None:
        self.config = config
        self.host = config.embedded.host
        self.port = config.embedded.port
        self.data_dir = get_app_data_dir(config.embedded)
        self.store = FileBackendStore(
            self.data_dir / BACKEND_CONFIG_NAME,
            default_url=config.backend.default_url,
            env_var=config.backend.env_var,
        )
        self.app = create_app(config, logger, store=self.store)
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        """Origin the shell's window should load."""
        return f"http://{self.host}:{self.port}"

    @property
    def is_running(self) -> bool:
        return bool(self._server and self._server.started and self._thread and self._thread.is_alive())

    def start(self, timeout: float = 5.0) -> str:
        """Start listening and wait until the socket is bound."""
        if self.is_running:
            logger.warning("Embedded server already running on %s", self.url)
            return self.url

        if is_port_in_use(self.host, self.port):
            raise ConfigurationError(f"Port {self.port} is already in use")

        uvicorn_config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level="warning",
            timeout_keep_alive=self.config.limits.keep_alive_timeout,
        )
        self._server = uvicorn.Server(uvicorn_config)
        self._thread = threading.Thread(target=self._server.run, name="embedded-server", daemon=True)
        self._thread.start()

        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self._server.started:
                logger.info("Embedded server started on %s (backend %s)", self.url, self.store.read())
                return self.url
            if not self._thread.is_alive():
                break
            time.sleep(0.05)

        self.stop()
        raise ConfigurationError(f"Embedded server did not start on {self.url}")

    def stop(self, timeout: float = 5.0) -> None:
        """Ask uvicorn to exit and wait for the thread."""
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._server = None
        self._thread = None
        logger.info("Embedded server stopped")

"""Backend-location store - the persisted active backend origin."""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.config import DEFAULT_BACKEND_URL
from core.exceptions import ConfigurationError, PersistenceError

logger = logging.getLogger(__name__)

BACKEND_URL_REQUIRED = "backendUrl is required"


class BackendConfig(BaseModel):
    """On-disk shape: {"backendUrl": "<origin>"}."""

    model_config = ConfigDict(populate_by_name=True)

    backend_url: str = Field(alias="backendUrl")


def normalize_backend_url(url: object) -> str:
    """Return the trimmed URL or raise ConfigurationError when empty."""
    if not isinstance(url, str) or not url.strip():
        raise ConfigurationError(BACKEND_URL_REQUIRED)
    return url.strip()


class FileBackendStore:
    """Backend origin stored as a JSON file, re-read on every access.

    Reads never raise: a missing, unreadable or corrupt file falls back to
    the environment override, then to the fixed default. Writes go to a
    temporary file that replaces the target, so a concurrent read sees
    either the old or the new value.
    """

    def __init__(
        self,
        path: Path,
        default_url: str = DEFAULT_BACKEND_URL,
        env_var: str = "BACKEND_URL",
    ) -> None:
        self.path = Path(path)
        self._default_url = default_url
        self._env_var = env_var
        self._session_url: str | None = None
        self.persisted = True

    def read(self) -> str:
        """Return the current backend origin."""
        if self._session_url is not None:
            return self._session_url

        stored = self._load()
        if stored:
            return stored

        fallback = self._fallback()
        if not self.path.exists():
            self._seed(fallback)
        return fallback

    def write(self, url: str) -> str:
        """Persist a new backend origin and return the stored value.

        A failed disk write keeps the value for this process only.
        """
        url = normalize_backend_url(url)
        try:
            self._persist(url)
        except PersistenceError as e:
            logger.warning(
                "Backend URL %s kept for this session only, not persisted: %s", url, e
            )
            self._session_url = url
            self.persisted = False
            return url

        self._session_url = None
        self.persisted = True
        logger.info("Saved backend URL: %s", url)
        return url

    def _fallback(self) -> str:
        env_value = os.environ.get(self._env_var, "").strip()
        return env_value or self._default_url

    def _load(self) -> str | None:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Failed to read backend config %s: %s", self.path, e)
            return None

        try:
            config = BackendConfig.model_validate(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring corrupt backend config %s: %s", self.path, e)
            return None
        return config.backend_url.strip() or None

    def _seed(self, url: str) -> None:
        try:
            self._persist(url)
        except PersistenceError as e:
            logger.debug("Could not seed backend config: %s", e)

    def _persist(self, url: str) -> None:
        payload = BackendConfig(backend_url=url).model_dump_json(by_alias=True, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(str(e), path=str(self.path)) from e


class MemoryBackendStore:
    """In-process store with the same contract as FileBackendStore."""

    def __init__(self, default_url: str = DEFAULT_BACKEND_URL) -> None:
        self._url = default_url
        self.persisted = True

    def read(self) -> str:
        return self._url

    def write(self, url: str) -> str:
        self._url = normalize_backend_url(url)
        return self._url

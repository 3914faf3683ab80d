"""Configuration models and loading."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "luo-gateway"
CONFIG_FILE = CONFIG_DIR / "config.json"
BACKEND_CONFIG_NAME = "backend-config.json"

DEFAULT_BACKEND_URL = "http://localhost:8080"


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    static_dir: str = "dist"
    spa_fallback: bool = True


class BackendSettings(BaseModel):
    default_url: str = DEFAULT_BACKEND_URL
    env_var: str = "BACKEND_URL"
    # None means <CONFIG_DIR>/backend-config.json
    config_file: str | None = None


class EmbeddedSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3000
    data_dir: str | None = None


class DevSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5173


class LimitSettings(BaseModel):
    connect_timeout: float = 10.0
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5


class UiSettings(BaseModel):
    dashboard: bool = True


class Config(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    backend: BackendSettings = Field(default_factory=BackendSettings)
    embedded: EmbeddedSettings = Field(default_factory=EmbeddedSettings)
    dev: DevSettings = Field(default_factory=DevSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)
    ui: UiSettings = Field(default_factory=UiSettings)

    def backend_config_path(self) -> Path:
        """Location of the persisted backend origin for the server adapters."""
        if self.backend.config_file:
            return Path(self.backend.config_file).expanduser()
        return CONFIG_DIR / BACKEND_CONFIG_NAME


def get_app_data_dir(settings: EmbeddedSettings | None = None) -> Path:
    """User data directory for the embedded server's runtime files."""
    if settings and settings.data_dir:
        return Path(settings.data_dir).expanduser()
    if os.name == "nt":
        appdata_dir = Path(os.getenv("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return appdata_dir / "LuoGateway"
    xdg_data = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_data) if xdg_data else Path.home() / ".local" / "share"
    return base / "luo-gateway"


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return apply_env_overrides(default)

    try:
        data = json.loads(config_file.read_text())
        config = Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        config = Config()
        config_file.write_text(config.model_dump_json(indent=2))
    return apply_env_overrides(config)


def apply_env_overrides(config: Config) -> Config:
    """Apply process environment on top of the file settings."""
    port = os.environ.get("PORT", "").strip()
    if port.isdigit():
        config.server.port = int(port)
    return config

"""Server connection settings with JSON persistence."""

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from .client import DEFAULT_REQUEST_TIMEOUT, ComfyClient


CONFIG_PATH = Path("data") / "server.json"

ENV_CONFIG_PATH = "COMFYRUN_CONFIG"
ENV_API_URL = "COMFYUI_API_URL"
ENV_API_KEY = "COMFYUI_API_KEY"


class ConfigError(Exception):
    """Raised when no usable server configuration is available."""

    pass


@dataclass
class ServerConfig:
    """Connection settings for one ComfyUI server."""

    api_url: str
    api_key: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def create_client(self) -> ComfyClient:
        return ComfyClient(self.api_url, api_key=self.api_key, request_timeout=self.request_timeout)


def get_config_path() -> Path:
    """Return the settings file path, honouring COMFYRUN_CONFIG."""
    override = os.environ.get(ENV_CONFIG_PATH)
    return Path(override) if override else CONFIG_PATH


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Failed to load server config from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Server config in {path} must be a JSON object")
    return data


def load_server_config(path: Optional[Path] = None) -> ServerConfig:
    """Load settings from disk, with environment variables taking precedence.

    Args:
        path: Settings file, defaults to get_config_path()

    Raises:
        ConfigError: If the file is unreadable or no API URL is configured.
    """
    data = _read_config_file(path or get_config_path())

    api_url = os.environ.get(ENV_API_URL) or data.get("api_url")
    if not api_url:
        raise ConfigError(f"No ComfyUI API URL configured (set {ENV_API_URL} or run 'comfyrun server set')")

    api_key = os.environ.get(ENV_API_KEY) or data.get("api_key") or None

    try:
        request_timeout = float(data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid request_timeout: {data.get('request_timeout')!r}") from e

    return ServerConfig(api_url=api_url, api_key=api_key, request_timeout=request_timeout)


def save_server_config(config: ServerConfig, path: Optional[Path] = None) -> Path:
    """Write settings to disk and return the path written."""
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(config), f, indent=2, ensure_ascii=False)
    return path

"""Tests for server configuration persistence."""

import json
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from comfyrun.remote.config import ConfigError, ServerConfig, load_server_config, save_server_config


@pytest.fixture
def config_dir():
    """Temporary directory with no environment overrides."""
    with tempfile.TemporaryDirectory() as tmpdir:
        with patch.dict(os.environ, {}, clear=True):
            yield Path(tmpdir)


def test_save_and_load(config_dir):
    """Test that saved settings are loaded back."""
    path = config_dir / "nested" / "server.json"
    save_server_config(ServerConfig(api_url="http://comfy:8188", api_key="k", request_timeout=10), path)

    config = load_server_config(path)

    assert config == ServerConfig(api_url="http://comfy:8188", api_key="k", request_timeout=10.0)


def test_environment_overrides_file(config_dir):
    """Test that environment variables take precedence."""
    path = config_dir / "server.json"
    save_server_config(ServerConfig(api_url="http://file:8188", api_key="file-key"), path)

    with patch.dict(os.environ, {"COMFYUI_API_URL": "http://env:8188", "COMFYUI_API_KEY": "env-key"}):
        config = load_server_config(path)

    assert config.api_url == "http://env:8188"
    assert config.api_key == "env-key"


def test_config_path_env_var(config_dir):
    """Test that COMFYRUN_CONFIG selects the settings file."""
    path = config_dir / "custom.json"
    path.write_text(json.dumps({"api_url": "http://custom:8188"}))

    with patch.dict(os.environ, {"COMFYRUN_CONFIG": str(path)}):
        config = load_server_config()

    assert config.api_url == "http://custom:8188"
    assert config.api_key is None


def test_missing_url_raises(config_dir):
    with pytest.raises(ConfigError, match="No ComfyUI API URL"):
        load_server_config(config_dir / "absent.json")


def test_corrupt_file_raises(config_dir):
    """Test that an unreadable file is reported rather than ignored."""
    path = config_dir / "server.json"
    path.write_text("{invalid json")

    with pytest.raises(ConfigError, match="Failed to load"):
        load_server_config(path)


def test_create_client(config_dir):
    """Test that the client is built from the settings."""
    client = ServerConfig(api_url="http://comfy:8188/", api_key="k", request_timeout=5).create_client()

    assert client.api_url == "http://comfy:8188"
    assert client.request_timeout == 5
    assert client.session.headers["Authorization"] == "Bearer k"

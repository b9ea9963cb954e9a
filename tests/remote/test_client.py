"""Tests for the ComfyUI HTTP client."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from comfyrun.execution.job import OutputDescriptor
from comfyrun.remote.client import ComfyClient


def _response(status_code=200, json_data=None, content=b""):
    """Build a real requests.Response with the given payload."""
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(json_data).encode("utf-8") if json_data is not None else content
    return response


def test_bearer_header_when_api_key_set():
    """Test that the API key is sent as a bearer token."""
    client = ComfyClient("http://comfy.test/", api_key="secret")

    assert client.session.headers["Authorization"] == "Bearer secret"
    assert client.api_url == "http://comfy.test"


def test_no_auth_header_without_api_key():
    """Test that no Authorization header is sent without a key."""
    client = ComfyClient("http://comfy.test")

    assert "Authorization" not in client.session.headers


def test_queue_prompt_wraps_workflow():
    """Test that the workflow is posted under the prompt key."""
    client = ComfyClient("http://comfy.test", request_timeout=12)

    with patch.object(client.session, "post", return_value=_response(json_data={"prompt_id": "abc"})) as mock_post:
        result = client.queue_prompt({"1": {}})

    assert result == {"prompt_id": "abc"}
    mock_post.assert_called_once_with("http://comfy.test/prompt", json={"prompt": {"1": {}}}, timeout=12)


def test_get_history_url():
    """Test that history is fetched per prompt id."""
    client = ComfyClient("http://comfy.test")

    with patch.object(client.session, "get", return_value=_response(json_data={"abc": {}})) as mock_get:
        history = client.get_history("abc")

    assert history == {"abc": {}}
    assert mock_get.call_args[0][0] == "http://comfy.test/history/abc"


def test_view_passes_descriptor_as_params():
    """Test that file downloads send filename, subfolder and type."""
    client = ComfyClient("http://comfy.test")
    descriptor = OutputDescriptor(filename="out 1.png", subfolder="batch", location_kind="output")

    with patch.object(client.session, "get", return_value=_response(content=b"\x89PNG")) as mock_get:
        data = client.view(descriptor)

    assert data == b"\x89PNG"
    assert mock_get.call_args[1]["params"] == {"filename": "out 1.png", "subfolder": "batch", "type": "output"}


def test_non_2xx_raises():
    """Test that error responses raise HTTPError."""
    client = ComfyClient("http://comfy.test")

    with patch.object(client.session, "get", return_value=_response(status_code=500)):
        with pytest.raises(requests.HTTPError):
            client.system_stats()


def test_system_stats_tolerates_non_json_body():
    """Test that any 2xx response counts as alive."""
    client = ComfyClient("http://comfy.test")

    with patch.object(client.session, "get", return_value=_response(content=b"ok")):
        assert client.system_stats() == {}


def test_injected_session_is_used():
    """Test that a caller-provided session is used for requests."""
    session = MagicMock()
    session.headers = {}
    session.get.return_value = _response(json_data={"system": {}})

    client = ComfyClient("http://comfy.test", api_key="k", session=session)
    client.system_stats()

    assert session.headers["Authorization"] == "Bearer k"
    session.get.assert_called_once()

"""HTTP client for the ComfyUI server API."""

import logging
from typing import Optional

import requests

from comfyrun.execution.job import OutputDescriptor


logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0


class ComfyClient:
    """Thin wrapper around a requests session bound to one ComfyUI server.

    The base URL, API key and timeout are fixed at construction, so one client
    can be shared between download threads.
    """

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.request_timeout = request_timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

        if api_key:
            logger.debug("Using API key authentication")
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _url(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    def _get(self, path: str, **kwargs) -> requests.Response:
        response = self.session.get(self._url(path), timeout=self.request_timeout, **kwargs)
        response.raise_for_status()
        return response

    def system_stats(self) -> dict:
        """Probe the server. Any 2xx response means it is alive."""
        response = self._get("system_stats")
        try:
            return response.json()
        except ValueError:
            return {}

    def queue_prompt(self, workflow: dict) -> dict:
        """Queue a job graph and return the decoded response body."""
        response = self.session.post(
            self._url("prompt"),
            json={"prompt": workflow},
            timeout=self.request_timeout,
        )
        response.raise_for_status()
        return response.json()

    def get_history(self, prompt_id: str) -> dict:
        """Fetch the history entry for a prompt, keyed by prompt id."""
        return self._get(f"history/{prompt_id}").json()

    def view(self, descriptor: OutputDescriptor) -> bytes:
        """Download the raw bytes of an output file."""
        params = {
            "filename": descriptor.filename,
            "subfolder": descriptor.subfolder,
            "type": descriptor.location_kind,
        }
        return self._get("view", params=params).content

"""
HTTP client for a running patchbox server.
"""

import json
import logging

import requests

logger = logging.getLogger(__name__)


class PatchClientError(Exception):
    """Raised when the server cannot be reached or answers garbage."""


class PatchClient:
    def __init__(self, base_url: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def apply_patch(self, patch: str) -> dict:
        """POST a patch; returns ``{ok, path, op}`` or ``{error}``."""
        return self._post("/mcp/apply_patch", {"patch": patch})

    def rewrite_file(self, path: str, content: str = "") -> dict:
        """POST a full-file rewrite; returns ``{ok, path, op}`` or ``{error}``."""
        return self._post("/mcp/rewrite_file", {"path": path, "content": content})

    def _post(self, route: str, payload: dict) -> dict:
        url = f"{self.base_url}{route}"
        logger.debug("[PatchClient] POST %s", url)
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("[PatchClient] Connection error: %s", e)
            raise PatchClientError(f"Cannot reach {url}: {e}") from e

        # 4xx bodies carry the engine's {"error": ...}; 5xx do not
        if response.status_code >= 500:
            raise PatchClientError(f"Server error {response.status_code} from {url}")
        try:
            data = response.json()
        except (ValueError, json.JSONDecodeError) as e:
            raise PatchClientError(f"Invalid JSON from {url}: {e}") from e
        if not isinstance(data, dict):
            raise PatchClientError(f"Unexpected response from {url}: {data!r}")
        return data

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

logger = logging.getLogger(__name__)


class RemoteSessionClient:
    """Talks to the session API; every failure degrades to "no remote data"."""

    def __init__(self, client: httpx.Client, base_path: str = "/api/session") -> None:
        self._client = client
        self._base_path = base_path.rstrip("/")

    def _url(self, session_id: str) -> str:
        return f"{self._base_path}/{session_id}"

    def fetch(self, session_id: str) -> Dict[str, Any] | None:
        """GET the stored document; None when missing, unreachable or not JSON."""
        try:
            response = self._client.get(self._url(session_id))
        except httpx.HTTPError as e:
            logger.info("Server unavailable, using local data: %s", e)
            return None
        if response.status_code != 200:
            logger.info("No remote copy of session %s (HTTP %s)", session_id, response.status_code)
            return None
        try:
            document = response.json()
        except ValueError:
            logger.warning("Remote copy of session %s is not JSON", session_id)
            return None
        return document if isinstance(document, dict) else None

    def push(self, session_id: str, document: Dict[str, Any]) -> bool:
        """POST the full snapshot; returns False instead of raising on failure."""
        try:
            response = self._client.post(self._url(session_id), json=document)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Server save failed, data saved locally: %s", e)
            return False
        return True

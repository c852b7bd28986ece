from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


class LocalSessionCache:
    """Keyed on-disk mirror of session documents, one ``sim_<id>.json`` per session."""

    def __init__(self, cache_root: Path) -> None:
        self.cache_root = Path(cache_root)
        self.cache_root.mkdir(parents=True, exist_ok=True)

    def path_for(self, session_id: str) -> Path:
        return self.cache_root / f"sim_{session_id}.json"

    def read(self, session_id: str) -> Dict[str, Any] | None:
        """Return the cached document, or None if absent or unreadable."""
        path = self.path_for(session_id)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to parse local data for session %s: %s", session_id, e)
            return None
        if not isinstance(document, dict):
            logger.error("Local data for session %s is not an object", session_id)
            return None
        return document

    def write(self, session_id: str, document: Dict[str, Any]) -> None:
        path = self.path_for(session_id)
        tmp_path = path.with_suffix(".json.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(document, handle)
        os.replace(tmp_path, path)

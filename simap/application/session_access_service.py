"""Service for session id checks and server-side stamping of saved documents."""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict

from simap.domain.errors import DomainError, NotFoundError, ValidationError
from simap.domain.events import DomainEventPublisher, SessionDownloaded, SessionSaved
from simap.storage.interface import SessionStore

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_session_id(raw_id: str) -> str:
    """Strip everything outside ``[A-Za-z0-9_-]``; an id with nothing left is rejected."""
    session_id = _UNSAFE_ID_CHARS.sub("", raw_id)
    if not session_id:
        raise ValidationError("Session id must contain letters, digits, '_' or '-'")
    return session_id


class SessionAccessService:
    """Centralizes session lookup and upsert so routes stay thin."""

    def __init__(self, store: SessionStore, publisher: DomainEventPublisher | None = None) -> None:
        self._store = store
        self._publisher = publisher

    def _publish(self, event) -> None:
        if self._publisher is not None:
            self._publisher.publish(event)

    def _read(self, session_id: str) -> Dict[str, Any] | None:
        try:
            return self._store.get(session_id)
        except ValueError as e:
            logger.error("Stored session %s is unreadable: %s", session_id, e)
            raise DomainError("Failed to read session")

    def require_session(self, raw_id: str) -> Dict[str, Any]:
        """Return the stored document or raise NotFoundError."""
        session_id = sanitize_session_id(raw_id)
        document = self._read(session_id)
        if document is None:
            raise NotFoundError("Session not found")
        return document

    def save(self, raw_id: str, body: Dict[str, Any]) -> str:
        """Upsert a document, stamping ``sessionId``, ``updatedAt`` and, once, ``createdAt``."""
        session_id = sanitize_session_id(raw_id)
        document = dict(body)
        document["sessionId"] = session_id
        document["updatedAt"] = datetime.now(timezone.utc).isoformat()
        created = not document.get("createdAt")
        if created:
            document["createdAt"] = document["updatedAt"]

        try:
            self._store.put(session_id, document)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save session %s: %s", session_id, e)
            raise DomainError("Failed to save session")

        self._publish(SessionSaved(
            aggregate_id=session_id,
            created=created,
            community_count=len(document.get("communities") or []),
            connection_count=len(document.get("connections") or []),
        ))
        return session_id

    def export(self, raw_id: str) -> tuple[str, Dict[str, Any]]:
        """Document and sanitized id for a download."""
        session_id = sanitize_session_id(raw_id)
        document = self.require_session(session_id)
        self._publish(SessionDownloaded(aggregate_id=session_id))
        return session_id, document

"""Event handlers for domain events."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from simap.domain.events import DomainEventPublisher

if TYPE_CHECKING:
    from simap.domain.events import (
        SessionSaved,
        SessionDownloaded,
        EntityAdded,
        EntityRemoved,
        ConnectionSet,
        ConnectionRemoved,
    )

logger = logging.getLogger(__name__)


class AuditLogHandler:
    """Logs domain events for an audit trail."""
    
    def handle_session_saved(self, event: SessionSaved) -> None:
        verb = "created" if event.created else "updated"
        logger.info(
            f"[AUDIT] Session {verb}: {event.aggregate_id} "
            f"({event.community_count} communities, {event.connection_count} connections)"
        )
    
    def handle_session_downloaded(self, event: SessionDownloaded) -> None:
        logger.info(f"[AUDIT] Session downloaded: {event.aggregate_id}")
    
    def handle_entity_added(self, event: EntityAdded) -> None:
        logger.info(f"[AUDIT] Community added to {event.aggregate_id}: {event.entity_id} - {event.name}")
    
    def handle_entity_removed(self, event: EntityRemoved) -> None:
        logger.info(
            f"[AUDIT] Community removed from {event.aggregate_id}: {event.entity_id} "
            f"(cascaded {event.connections_removed} connections, {event.topics_removed} topics)"
        )
    
    def handle_connection_set(self, event: ConnectionSet) -> None:
        verb = "replaced" if event.replaced else "created"
        logger.info(f"[AUDIT] Connection {verb}: {event.source} - {event.target} ({event.type})")
    
    def handle_connection_removed(self, event: ConnectionRemoved) -> None:
        logger.info(f"[AUDIT] Connection removed: {event.source} - {event.target}")


def register_event_handlers(publisher: DomainEventPublisher | None = None) -> AuditLogHandler:
    """Register all event handlers with the publisher (the shared one by default)."""
    from simap.domain.events import (
        event_publisher,
        SessionSaved,
        SessionDownloaded,
        EntityAdded,
        EntityRemoved,
        ConnectionSet,
        ConnectionRemoved,
    )
    
    publisher = publisher or event_publisher
    audit = AuditLogHandler()
    
    publisher.subscribe(SessionSaved, audit.handle_session_saved)
    publisher.subscribe(SessionDownloaded, audit.handle_session_downloaded)
    publisher.subscribe(EntityAdded, audit.handle_entity_added)
    publisher.subscribe(EntityRemoved, audit.handle_entity_removed)
    publisher.subscribe(ConnectionSet, audit.handle_connection_set)
    publisher.subscribe(ConnectionRemoved, audit.handle_connection_removed)
    return audit

"""Domain events for decoupled side effects (audit logging, autosave hooks)."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class DomainEvent:
    """Base class for all domain events."""
    aggregate_id: str
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(kw_only=True)
class SessionSaved(DomainEvent):
    """Raised by the session API after a document is written."""
    created: bool
    community_count: int
    connection_count: int


@dataclass(kw_only=True)
class SessionDownloaded(DomainEvent):
    """Raised when a session document is exported as an attachment."""


@dataclass(kw_only=True)
class EntityAdded(DomainEvent):
    entity_id: str
    name: str


@dataclass(kw_only=True)
class EntityRemoved(DomainEvent):
    """Raised after an entity and everything referencing it is removed."""
    entity_id: str
    name: str
    connections_removed: int
    topics_removed: int


@dataclass(kw_only=True)
class ConnectionSet(DomainEvent):
    source: str
    target: str
    type: str
    replaced: bool


@dataclass(kw_only=True)
class ConnectionRemoved(DomainEvent):
    source: str
    target: str


Handler = Callable[[DomainEvent], None]


class DomainEventPublisher:
    """Synchronous in-process publisher; handlers run in subscription order."""

    def __init__(self) -> None:
        self._subscribers: Dict[type, List[Handler]] = {}

    def subscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        """Subscribe a handler to an event type."""
        self._subscribers.setdefault(event_type, []).append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers of its exact type."""
        for handler in self._subscribers.get(type(event), []):
            try:
                handler(event)
            except Exception:
                # A failing side effect must not undo the change that raised the event
                logger.exception("Event handler error for %s", type(event).__name__)

    def clear_subscribers(self) -> None:
        """Clear all subscribers (useful for testing)."""
        self._subscribers = {}


# Shared publisher for the API process
event_publisher = DomainEventPublisher()

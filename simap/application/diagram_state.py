"""Single mutable source of truth for one session's diagram."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from simap.domain.entities import (
    ATTRIBUTE_FIELDS,
    TOPICS_BY_ID,
    Connection,
    ConnectionType,
    Entity,
    Importance,
    PlacedTopic,
    Session,
    canonical_pair,
    generate_id,
)
from simap.domain.errors import ConflictError, NotFoundError, ValidationError
from simap.domain.events import (
    ConnectionRemoved,
    ConnectionSet,
    DomainEvent,
    DomainEventPublisher,
    EntityAdded,
    EntityRemoved,
)
from simap.domain.specifications import (
    ConnectionBetween,
    ConnectionTouches,
    EntityNamed,
    PlacedOnCommunity,
    PlacedTopicIs,
    exclude_by_specification,
    filter_by_specification,
)

logger = logging.getLogger(__name__)


class DiagramState:
    """Owns a ``Session`` and applies every diagram mutation to it.

    ``on_change`` is called after each successful mutation; the wizard wires
    it to the debounced autosave.
    """

    def __init__(
        self,
        session: Session,
        publisher: DomainEventPublisher | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.session = session
        self._publisher = publisher
        self._on_change = on_change

    # --------------- Internal helpers ---------------
    def _changed(self, event: DomainEvent | None = None) -> None:
        if event is not None and self._publisher is not None:
            self._publisher.publish(event)
        if self._on_change is not None:
            self._on_change()

    def notify_changed(self) -> None:
        """Report a change made without notification (end of a drag)."""
        self._changed()

    @property
    def entities(self) -> List[Entity]:
        return self.session.communities

    @property
    def connections(self) -> List[Connection]:
        return self.session.connections

    @property
    def placed_topics(self) -> List[PlacedTopic]:
        return self.session.placed_topics

    def get_entity(self, entity_id: str) -> Entity:
        for entity in self.session.communities:
            if entity.id == entity_id:
                return entity
        raise NotFoundError(f"Community not found: {entity_id}")

    def find_by_name(self, name: str) -> Optional[Entity]:
        matches = filter_by_specification(self.session.communities, EntityNamed(name))
        return matches[0] if matches else None

    # --------------- Entities ---------------
    def add_entity(self, name: str) -> Entity:
        """Create a community with a fresh id and no ratings or position.

        Raises ConflictError, leaving the state untouched, if a community
        with the same name (ignoring case) already exists.
        """
        name = name.strip()
        if not name:
            raise ValidationError("Community name cannot be empty")
        if self.find_by_name(name) is not None:
            raise ConflictError(f"A community named '{name}' already exists")

        existing_ids = {entity.id for entity in self.session.communities}
        entity_id = generate_id("c_")
        while entity_id in existing_ids:
            entity_id = generate_id("c_")

        entity = Entity(id=entity_id, name=name)
        self.session.communities.append(entity)
        self._changed(EntityAdded(aggregate_id=self.session.session_id, entity_id=entity.id, name=name))
        return entity

    def remove_entity(self, entity_id: str) -> None:
        """Remove a community and every connection and topic placement referencing it."""
        entity = self.get_entity(entity_id)
        connections_before = len(self.session.connections)
        topics_before = len(self.session.placed_topics)

        self.session.communities = [e for e in self.session.communities if e.id != entity_id]
        self.session.connections = exclude_by_specification(self.session.connections, ConnectionTouches(entity_id))
        self.session.placed_topics = exclude_by_specification(self.session.placed_topics, PlacedOnCommunity(entity_id))

        self._changed(EntityRemoved(
            aggregate_id=self.session.session_id,
            entity_id=entity_id,
            name=entity.name,
            connections_removed=connections_before - len(self.session.connections),
            topics_removed=topics_before - len(self.session.placed_topics),
        ))

    def set_attribute(self, entity_id: str, field_name: str, value: Any) -> None:
        """Set or clear (``None`` or ``""``) one numeric rating.

        Form input arrives as text, so strings are parsed as floats. Range
        hints such as 1-10 are not enforced here.
        """
        if field_name not in ATTRIBUTE_FIELDS:
            raise ValidationError(f"Unknown attribute: {field_name}")
        entity = self.get_entity(entity_id)

        if isinstance(value, str):
            value = value.strip() or None
        if value is not None:
            if isinstance(value, bool):
                raise ValidationError(f"{field_name} must be a number")
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise ValidationError(f"{field_name} must be a number, got {value!r}")

        setattr(entity, field_name, value)
        self._changed()

    def set_importance(self, entity_id: str, importance: Importance | str | None) -> None:
        entity = self.get_entity(entity_id)
        if importance in (None, ""):
            entity.importance = None
        else:
            try:
                entity.importance = Importance(importance)
            except ValueError:
                raise ValidationError(f"Unknown importance: {importance!r}")
        self._changed()

    def move_entity(self, entity_id: str, x: float, y: float, notify: bool = True) -> None:
        """Set a community's position; drags pass ``notify=False`` until release."""
        entity = self.get_entity(entity_id)
        entity.x, entity.y = float(x), float(y)
        if notify:
            self._changed()

    # --------------- Connections ---------------
    def get_connection(self, a: str, b: str) -> Optional[Connection]:
        matches = filter_by_specification(self.session.connections, ConnectionBetween(a, b))
        return matches[0] if matches else None

    def set_connection(self, a: str, b: str, connection_type: ConnectionType | str) -> Connection:
        """Create or replace the single connection for the unordered pair ``{a, b}``."""
        if a == b:
            raise ValidationError("A community cannot be connected to itself")
        self.get_entity(a)
        self.get_entity(b)
        try:
            kind = ConnectionType(connection_type)
        except ValueError:
            raise ValidationError(f"Unknown connection type: {connection_type!r}")

        source, target = canonical_pair(a, b)
        replaced = self.get_connection(a, b) is not None
        self.session.connections = exclude_by_specification(self.session.connections, ConnectionBetween(a, b))
        connection = Connection(source=source, target=target, type=kind)
        self.session.connections.append(connection)

        self._changed(ConnectionSet(
            aggregate_id=self.session.session_id,
            source=source,
            target=target,
            type=kind.value,
            replaced=replaced,
        ))
        return connection

    def remove_connection(self, a: str, b: str) -> bool:
        """Delete the connection for ``{a, b}``; returns False if there was none."""
        if self.get_connection(a, b) is None:
            return False
        self.session.connections = exclude_by_specification(self.session.connections, ConnectionBetween(a, b))
        source, target = canonical_pair(a, b)
        self._changed(ConnectionRemoved(aggregate_id=self.session.session_id, source=source, target=target))
        return True

    # --------------- Topics ---------------
    def topics_for(self, community_id: str) -> List[PlacedTopic]:
        return filter_by_specification(self.session.placed_topics, PlacedOnCommunity(community_id))

    def assign_topic(self, community_id: str, topic_id: str) -> PlacedTopic:
        """Place a topic on a community; the same topic may be placed many times."""
        self.get_entity(community_id)
        if topic_id not in TOPICS_BY_ID:
            raise ValidationError(f"Unknown topic: {topic_id}")
        placed = PlacedTopic(id=generate_id("pt_"), topic_id=topic_id, community_id=community_id)
        self.session.placed_topics.append(placed)
        self._changed()
        return placed

    def unassign_topic(self, community_id: str, topic_id: str) -> int:
        """Remove every placement of ``topic_id`` on a community; returns how many went."""
        spec = PlacedOnCommunity(community_id).and_(PlacedTopicIs(topic_id))
        before = len(self.session.placed_topics)
        self.session.placed_topics = exclude_by_specification(self.session.placed_topics, spec)
        removed = before - len(self.session.placed_topics)
        if removed:
            self._changed()
        return removed

    def move_placed_topic(self, placed_id: str, community_id: str | None) -> None:
        """Re-home a placed topic, or delete it when dropped off every card."""
        placed = next((p for p in self.session.placed_topics if p.id == placed_id), None)
        if placed is None:
            raise NotFoundError(f"Placed topic not found: {placed_id}")
        if community_id is None:
            self.session.placed_topics.remove(placed)
        else:
            self.get_entity(community_id)
            placed.community_id = community_id
        self._changed()

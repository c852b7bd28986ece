"""Specification pattern for reusable selection logic over session records."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, TypeVar

from simap.domain.entities import Connection, Entity, PlacedTopic

T = TypeVar("T")


class Specification(ABC):
    """Abstract base for specifications (record filters)."""

    @abstractmethod
    def is_satisfied_by(self, candidate: Any) -> bool:
        """Check if candidate satisfies this specification."""
        pass

    def and_(self, other: Specification) -> Specification:
        """Combine with AND logic."""
        return AndSpecification(self, other)

    def or_(self, other: Specification) -> Specification:
        """Combine with OR logic."""
        return OrSpecification(self, other)

    def not_(self) -> Specification:
        """Negate this specification."""
        return NotSpecification(self)


class AndSpecification(Specification):
    def __init__(self, left: Specification, right: Specification):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) and self.right.is_satisfied_by(candidate)


class OrSpecification(Specification):
    def __init__(self, left: Specification, right: Specification):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) or self.right.is_satisfied_by(candidate)


class NotSpecification(Specification):
    def __init__(self, spec: Specification):
        self.spec = spec

    def is_satisfied_by(self, candidate: Any) -> bool:
        return not self.spec.is_satisfied_by(candidate)


# Entity specifications

class EntityNamed(Specification):
    """Entities whose name equals ``name`` ignoring case and outer whitespace."""

    def __init__(self, name: str):
        self.name = name.strip().casefold()

    def is_satisfied_by(self, entity: Entity) -> bool:
        return entity.name.strip().casefold() == self.name


class EntityHasImportance(Specification):
    """Entities that have been given an importance category."""

    def is_satisfied_by(self, entity: Entity) -> bool:
        return entity.importance is not None


class EntityIsPlaced(Specification):
    """Entities that already have both coordinates."""

    def is_satisfied_by(self, entity: Entity) -> bool:
        return entity.is_placed


# Connection specifications

class ConnectionTouches(Specification):
    """Connections with ``entity_id`` at either end."""

    def __init__(self, entity_id: str):
        self.entity_id = entity_id

    def is_satisfied_by(self, connection: Connection) -> bool:
        return connection.touches(self.entity_id)


class ConnectionBetween(Specification):
    """The connection for an unordered pair, in whichever orientation it is stored."""

    def __init__(self, a: str, b: str):
        self.ids = {a, b}

    def is_satisfied_by(self, connection: Connection) -> bool:
        return {connection.source, connection.target} == self.ids


# Placed topic specifications

class PlacedOnCommunity(Specification):
    def __init__(self, community_id: str):
        self.community_id = community_id

    def is_satisfied_by(self, placed: PlacedTopic) -> bool:
        return placed.community_id == self.community_id


class PlacedTopicIs(Specification):
    def __init__(self, topic_id: str):
        self.topic_id = topic_id

    def is_satisfied_by(self, placed: PlacedTopic) -> bool:
        return placed.topic_id == self.topic_id


# Helper function to filter collections

def filter_by_specification(items: List[T], spec: Specification) -> List[T]:
    """Filter a collection using a specification."""
    return [item for item in items if spec.is_satisfied_by(item)]


def exclude_by_specification(items: List[T], spec: Specification) -> List[T]:
    """Keep only the items the specification rejects."""
    return [item for item in items if not spec.is_satisfied_by(item)]

"""Domain entities for a mapping session.

The wire form of a session is the camelCase JSON document the browser client
and the session API exchange; these dataclasses are the in-memory form.
Unknown top-level keys survive a load/save round trip via ``Session.extra``.
"""
from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from simap.domain.errors import ValidationError

SCHEMA_VERSION = 2
TOTAL_STEPS = 6

ATTRIBUTE_FIELDS = ("positivity", "contact", "tenure", "representativeness")

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id(prefix: str = "") -> str:
    """Return ``prefix`` followed by nine random base-36 characters."""
    return prefix + "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


class Importance(str, Enum):
    """Importance category; also selects the card size class."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConnectionType(str, Enum):
    """How easy it is to discuss news between two communities."""

    EASY = "easy"
    MODERATE = "moderate"
    DIFFICULT = "difficult"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class CoordinateSystem(str, Enum):
    """Unit of stored entity positions."""

    ABSOLUTE = "absolute"  # canvas pixels
    NORMALIZED = "normalized"  # fractions of the container, in [0, 1]


@dataclass(frozen=True)
class NewsTopic:
    id: str
    icon: str
    short: str
    full: str


NEWS_TOPICS = (
    NewsTopic("international", "\U0001F30D", "International", "International / World News"),
    NewsTopic("national", "\U0001F3DB\uFE0F", "National", "National Politics"),
    NewsTopic("local", "\U0001F3D8\uFE0F", "Local", "Local / Community News"),
    NewsTopic("campus", "\U0001F393", "Campus", "Campus / Education"),
    NewsTopic("business", "\U0001F4BC", "Business", "Business & Economy"),
    NewsTopic("science", "\U0001F52C", "Science", "Science & Technology"),
    NewsTopic("entertainment", "\U0001F3AC", "Entertainment", "Entertainment"),
    NewsTopic("sports", "\u26BD", "Sports", "Sports"),
    NewsTopic("health", "\U0001F3E5", "Health", "Health & Lifestyle"),
    NewsTopic("professional", "\U0001F4CA", "Professional", "Professional / Industry"),
)

TOPICS_BY_ID: Dict[str, NewsTopic] = {topic.id: topic for topic in NEWS_TOPICS}


def _optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number or null, got {value!r}")
    return float(value)


def _record(data: Any, kind: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"Malformed {kind} record: {data!r}")
    return data


def _records(data: Dict[str, Any], key: str) -> List[Any]:
    """The list stored under ``key``; missing or null reads as empty."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{key} must be a list, got {type(value).__name__}")
    return value


def canonical_pair(a: str, b: str) -> tuple[str, str]:
    """Order two entity ids so the lexicographically smaller one comes first."""
    return (a, b) if a <= b else (b, a)


@dataclass
class Entity:
    """A community placed on the map."""

    id: str
    name: str
    importance: Optional[Importance] = None
    positivity: Optional[float] = None
    contact: Optional[float] = None
    tenure: Optional[float] = None
    representativeness: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def is_placed(self) -> bool:
        return self.x is not None and self.y is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "importance": self.importance.value if self.importance else None,
            "positivity": self.positivity,
            "contact": self.contact,
            "tenure": self.tenure,
            "representativeness": self.representativeness,
            "x": self.x,
            "y": self.y,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Entity:
        data = _record(data, "community")
        try:
            importance = Importance(data["importance"]) if data.get("importance") else None
            entity = cls(id=str(data["id"]), name=str(data["name"]), importance=importance)
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed community record: {data!r}") from e
        for name in ATTRIBUTE_FIELDS + ("x", "y"):
            setattr(entity, name, _optional_float(data.get(name), name))
        return entity


@dataclass
class Connection:
    """Undirected typed edge, stored with ``source < target``."""

    source: str
    target: str
    type: ConnectionType

    def __post_init__(self) -> None:
        self.source, self.target = canonical_pair(self.source, self.target)

    @property
    def pair(self) -> tuple[str, str]:
        return (self.source, self.target)

    def touches(self, entity_id: str) -> bool:
        return entity_id in (self.source, self.target)

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.source, "to": self.target, "type": self.type.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Connection:
        data = _record(data, "connection")
        try:
            return cls(source=str(data["from"]), target=str(data["to"]), type=ConnectionType(data["type"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed connection record: {data!r}") from e


@dataclass
class PlacedTopic:
    """Assignment of a news topic to a community."""

    id: str
    topic_id: str
    community_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "topicId": self.topic_id, "communityId": self.community_id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PlacedTopic:
        data = _record(data, "placed topic")
        try:
            return cls(id=str(data["id"]), topic_id=str(data["topicId"]), community_id=str(data["communityId"]))
        except KeyError as e:
            raise ValidationError(f"Malformed placed topic record: {data!r}") from e


_KNOWN_KEYS = {
    "sessionId", "createdAt", "updatedAt", "currentStep", "coordinateSystem",
    "schemaVersion", "communities", "connections", "placedTopics",
}


@dataclass
class Session:
    """Full persisted state of one respondent's run through the wizard."""

    session_id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    current_step: int = 0
    coordinate_system: CoordinateSystem = CoordinateSystem.ABSOLUTE
    schema_version: int = SCHEMA_VERSION
    communities: List[Entity] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)
    placed_topics: List[PlacedTopic] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        document = dict(self.extra)
        document.update({
            "sessionId": self.session_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "currentStep": self.current_step,
            "coordinateSystem": self.coordinate_system.value,
            "schemaVersion": self.schema_version,
            "communities": [c.to_dict() for c in self.communities],
            "connections": [c.to_dict() for c in self.connections],
            "placedTopics": [p.to_dict() for p in self.placed_topics],
        })
        return document

    @classmethod
    def from_dict(cls, data: Dict[str, Any], session_id: str | None = None) -> Session:
        """Build a session from its wire form.

        Documents written before coordinate tagging carry neither
        ``coordinateSystem`` nor ``schemaVersion``; they load as absolute
        pixels with ``schema_version`` 1 so the migration step can see them.
        Legacy placed topics (``{x, y}`` without ``communityId``) are kept in
        ``extra["legacyPlacedTopics"]`` for the same reason.
        """
        if not isinstance(data, dict):
            raise ValidationError("Session document must be a JSON object")
        try:
            coordinate_system = CoordinateSystem(data.get("coordinateSystem") or CoordinateSystem.ABSOLUTE)
            current_step = int(data.get("currentStep") or 0)
            schema_version = int(data.get("schemaVersion") or 1)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Malformed session header: {e}") from e

        placed, legacy = [], []
        for item in _records(data, "placedTopics"):
            if isinstance(item, dict) and "communityId" not in item and "x" in item:
                legacy.append(item)
            else:
                placed.append(PlacedTopic.from_dict(item))

        extra = {key: value for key, value in data.items() if key not in _KNOWN_KEYS}
        if legacy:
            extra["legacyPlacedTopics"] = legacy

        return cls(
            session_id=str(data.get("sessionId") or session_id or ""),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            current_step=current_step,
            coordinate_system=coordinate_system,
            schema_version=schema_version,
            communities=[Entity.from_dict(c) for c in _records(data, "communities")],
            connections=[Connection.from_dict(c) for c in _records(data, "connections")],
            placed_topics=placed,
            extra=extra,
        )

"""Pure, load-time transforms between session schema revisions.

Schema 1 documents carry no ``coordinateSystem`` tag and may still hold
placed topics as free-floating ``{x, y}`` points. They are upgraded once,
when a session is loaded, instead of guessing the unit from value sizes
every time a position is read.
"""
from __future__ import annotations

import copy
import logging
import math
from typing import Optional

from simap.domain.entities import (
    SCHEMA_VERSION,
    CoordinateSystem,
    Importance,
    PlacedTopic,
    Session,
)
from simap.domain.errors import ValidationError

logger = logging.getLogger(__name__)

# Card sizes of the first desktop layout; legacy topic points were dropped
# relative to cards of these sizes.
LEGACY_CARD_SIZES = {Importance.HIGH: 130.0, Importance.MEDIUM: 100.0, Importance.LOW: 75.0}

_LEGACY_TUTORIAL_KEYS = {
    "tutorialStep3Shown": "tutorialPositionShown",
    "tutorialStep4Shown": "tutorialDiscourseShown",
}


def _nearest_community(session: Session, x: float, y: float) -> Optional[str]:
    nearest_id, nearest_dist = None, math.inf
    for community in session.communities:
        if not community.is_placed:
            continue
        size = LEGACY_CARD_SIZES[community.importance or Importance.MEDIUM]
        dist = math.hypot(x - (community.x + size / 2), y - (community.y + size / 2))
        if dist < nearest_dist:
            nearest_id, nearest_dist = community.id, dist
    return nearest_id


def attach_legacy_topics(session: Session) -> Session:
    """Snap legacy ``{x, y}`` topic placements to the nearest placed community.

    Points with no placed community to snap to are discarded.
    """
    migrated = copy.deepcopy(session)
    legacy = migrated.extra.pop("legacyPlacedTopics", None)
    if not isinstance(legacy, list):
        legacy = []
    for item in legacy:
        try:
            x, y = float(item["x"]), float(item["y"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Dropping legacy topic point with bad coordinates: %r", item)
            continue
        community_id = _nearest_community(migrated, x, y)
        if community_id is None:
            continue
        migrated.placed_topics.append(
            PlacedTopic(id=str(item.get("id")), topic_id=str(item.get("topicId")), community_id=community_id)
        )
    return migrated


def upgrade_session(session: Session) -> Session:
    """Bring a loaded session up to the current schema version.

    Untagged (schema 1) documents were always written in canvas pixels, so
    they are tagged ``absolute``.
    """
    if session.schema_version >= SCHEMA_VERSION and "legacyPlacedTopics" not in session.extra:
        return session

    upgraded = attach_legacy_topics(session)
    if upgraded.schema_version < SCHEMA_VERSION:
        upgraded.coordinate_system = CoordinateSystem.ABSOLUTE
        for old_key, new_key in _LEGACY_TUTORIAL_KEYS.items():
            if upgraded.extra.pop(old_key, False):
                upgraded.extra[new_key] = True
        upgraded.schema_version = SCHEMA_VERSION
    return upgraded


def convert_coordinates(session: Session, target: CoordinateSystem, width: float, height: float) -> Session:
    """Return a copy of ``session`` with positions expressed in ``target`` units."""
    if width <= 0 or height <= 0:
        raise ValidationError("Container size must be positive to convert coordinates")
    if session.coordinate_system is target:
        return session

    converted = copy.deepcopy(session)
    to_normalized = target is CoordinateSystem.NORMALIZED
    for community in converted.communities:
        if not community.is_placed:
            continue
        if to_normalized:
            community.x, community.y = community.x / width, community.y / height
        else:
            community.x, community.y = community.x * width, community.y * height
    converted.coordinate_system = target
    return converted


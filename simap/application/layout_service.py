"""Initial placement of communities and the fitted summary view."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from simap.domain.entities import CoordinateSystem, Entity, Importance, Session
from simap.domain.errors import ValidationError
from simap.domain.specifications import EntityIsPlaced, filter_by_specification

CARD_SIZES = {Importance.HIGH: 130.0, Importance.MEDIUM: 100.0, Importance.LOW: 75.0}

SizeOf = Callable[[Optional[Importance]], float]

# Fraction of the smaller half-dimension used as the seeding circle radius
RING_RADIUS_RATIO = 0.5
SUMMARY_PADDING = 20.0
TOPIC_ROW_HEIGHT = 24.0
TOPICS_PER_ROW = 2


def card_size(importance: Optional[Importance]) -> float:
    """Side length of a (square) card for an importance class; unset counts as medium."""
    return CARD_SIZES[importance or Importance.MEDIUM]


def seed_positions(session: Session, width: float, height: float, size_of: SizeOf = card_size) -> List[str]:
    """Give every unplaced community a spot on a ring around the canvas centre.

    Slot ``i`` of ``n`` (creation order over all communities) sits at angle
    ``2*pi*i/n``; the card is offset by half its size so its centre is on the
    ring. Placed communities are left where they are, even if the canvas has
    since been resized. Returns the ids that were placed.
    """
    if width <= 0 or height <= 0:
        raise ValidationError("Canvas size must be positive")

    center_x, center_y = width / 2, height / 2
    radius = min(center_x, center_y) * RING_RADIUS_RATIO
    normalized = session.coordinate_system is CoordinateSystem.NORMALIZED
    count = len(session.communities)

    placed = []
    for index, entity in enumerate(session.communities):
        if entity.is_placed:
            continue
        angle = index / count * 2 * math.pi
        half = size_of(entity.importance) / 2
        x = center_x + math.cos(angle) * radius - half
        y = center_y + math.sin(angle) * radius - half
        if normalized:
            x, y = x / width, y / height
        entity.x, entity.y = x, y
        placed.append(entity.id)
    return placed


@dataclass
class ViewportFit:
    """Transform that fits every card (and its topic tags) into a read-only view."""

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    content_width: float = 0.0
    content_height: float = 0.0
    positions: Dict[str, Tuple[float, float]] = field(default_factory=dict)


def _topic_block_height(topic_count: int) -> float:
    if topic_count <= 0:
        return 0.0
    return math.ceil(topic_count / TOPICS_PER_ROW) * TOPIC_ROW_HEIGHT + 8


def fit_to_viewport(
    session: Session,
    container_width: float,
    container_height: float,
    size_of: SizeOf = card_size,
) -> ViewportFit:
    """Compute the summary view: content bounds, a scale no larger than 1, centring offsets.

    ``positions`` holds each placed card's top-left relative to the content
    box, including the padding margin. Positions are assumed to be pixels.
    """
    placed: List[Entity] = filter_by_specification(session.communities, EntityIsPlaced())
    if not placed:
        return ViewportFit()

    topic_counts: Dict[str, int] = {}
    for topic in session.placed_topics:
        topic_counts[topic.community_id] = topic_counts.get(topic.community_id, 0) + 1

    min_x = min(e.x for e in placed)
    min_y = min(e.y for e in placed)
    max_x = max(e.x + size_of(e.importance) for e in placed)
    max_y = max(
        e.y + size_of(e.importance) + _topic_block_height(topic_counts.get(e.id, 0))
        for e in placed
    )

    content_width = max_x - min_x + 2 * SUMMARY_PADDING
    content_height = max_y - min_y + 2 * SUMMARY_PADDING
    scale = min(container_width / content_width, container_height / content_height, 1.0)

    return ViewportFit(
        scale=scale,
        offset_x=(container_width - content_width * scale) / 2,
        offset_y=(container_height - content_height * scale) / 2,
        content_width=content_width,
        content_height=content_height,
        positions={
            e.id: (e.x - min_x + SUMMARY_PADDING, e.y - min_y + SUMMARY_PADDING) for e in placed
        },
    )

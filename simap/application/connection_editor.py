"""Two-phase creation, editing and removal of connections."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from simap.application.diagram_state import DiagramState
from simap.application.layout_service import card_size
from simap.domain.entities import Connection, ConnectionType, Importance, Session, canonical_pair
from simap.domain.errors import NotFoundError, ValidationError
from simap.domain.strategies import ConnectionPath, Point, connection_path, label_anchor

logger = logging.getLogger(__name__)


class EditorPhase(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    PENDING = "pending_classification"


@dataclass
class Drawing:
    """A line being dragged out of ``from_id``; points are canvas coordinates."""

    from_id: str
    start: Point
    current: Point
    pointer_id: Optional[int] = None


@dataclass
class PendingClassification:
    """A canonical pair waiting for the respondent to pick a type."""

    source: str
    target: str
    existing_type: Optional[ConnectionType] = None

    @property
    def existing(self) -> bool:
        return self.existing_type is not None


class ConnectionEditor:
    """State machine: Idle -> Drawing -> PendingClassification -> Idle."""

    def __init__(self, state: DiagramState) -> None:
        self._state = state
        self.drawing: Optional[Drawing] = None
        self.pending: Optional[PendingClassification] = None

    @property
    def phase(self) -> EditorPhase:
        if self.drawing is not None:
            return EditorPhase.DRAWING
        if self.pending is not None:
            return EditorPhase.PENDING
        return EditorPhase.IDLE

    def _require(self, phase: EditorPhase) -> None:
        if self.phase is not phase:
            raise ValidationError(f"Connection editor is {self.phase.value}, expected {phase.value}")

    def _open(self, a: str, b: str) -> PendingClassification:
        source, target = canonical_pair(a, b)
        existing = self._state.get_connection(source, target)
        self.pending = PendingClassification(source, target, existing.type if existing else None)
        return self.pending

    # --------------- Drawing ---------------
    def start(self, from_id: str, origin: Point, pointer_id: Optional[int] = None) -> Drawing:
        """Begin drawing from a community's centre."""
        self._require(EditorPhase.IDLE)
        self._state.get_entity(from_id)
        self.drawing = Drawing(from_id=from_id, start=origin, current=origin, pointer_id=pointer_id)
        return self.drawing

    def track(self, x: float, y: float) -> None:
        self._require(EditorPhase.DRAWING)
        self.drawing.current = (x, y)

    def preview(self) -> Optional[ConnectionPath]:
        """Straight preview line while drawing, otherwise None."""
        if self.drawing is None:
            return None
        (x1, y1), (x2, y2) = self.drawing.start, self.drawing.current
        return connection_path(x1, y1, x2, y2, ConnectionType.EASY)

    def release(self, target_id: Optional[str]) -> Optional[PendingClassification]:
        """Finish the drag over ``target_id`` (None for empty canvas).

        Releasing over the source community or over nothing aborts to Idle.
        """
        self._require(EditorPhase.DRAWING)
        from_id = self.drawing.from_id
        self.drawing = None
        if target_id is None or target_id == from_id:
            return None
        self._state.get_entity(target_id)
        return self._open(from_id, target_id)

    # --------------- Classification ---------------
    def edit(self, a: str, b: str) -> PendingClassification:
        """Reopen classification for a committed connection (clicking its line)."""
        self._require(EditorPhase.IDLE)
        if self._state.get_connection(a, b) is None:
            raise NotFoundError(f"No connection between {a} and {b}")
        return self._open(a, b)

    def prompt(self) -> str:
        self._require(EditorPhase.PENDING)
        source = self._state.get_entity(self.pending.source).name
        target = self._state.get_entity(self.pending.target).name
        return (
            f"Would discussions about news between {source} and {target} "
            "members be easy or difficult?"
        )

    def choose(self, connection_type: ConnectionType | str) -> Connection:
        """Create or replace the pending pair's connection and return to Idle."""
        self._require(EditorPhase.PENDING)
        connection = self._state.set_connection(self.pending.source, self.pending.target, connection_type)
        self.pending = None
        return connection

    def remove(self) -> bool:
        self._require(EditorPhase.PENDING)
        removed = self._state.remove_connection(self.pending.source, self.pending.target)
        self.pending = None
        return removed

    def cancel(self) -> None:
        """Drop any drawing or pending state without touching connections."""
        self.drawing = None
        self.pending = None


@dataclass
class RenderedConnection:
    source: str
    target: str
    type: ConnectionType
    path: ConnectionPath
    label: str
    label_at: Point


def render_connections(
    session: Session,
    size_of: Callable[[Optional[Importance]], float] = card_size,
    positions: Optional[Dict[str, Tuple[float, float]]] = None,
) -> List[RenderedConnection]:
    """Paths and labels for every connection, drawn between card centres.

    ``positions`` overrides stored top-left corners (the fitted summary view
    passes its shifted positions). Connections to unplaced communities are
    skipped.
    """
    by_id = {entity.id: entity for entity in session.communities}
    rendered = []
    for connection in session.connections:
        ends = []
        for entity_id in connection.pair:
            entity = by_id.get(entity_id)
            if entity is None:
                break
            corner = positions.get(entity_id) if positions is not None else (
                (entity.x, entity.y) if entity.is_placed else None
            )
            if corner is None:
                break
            half = size_of(entity.importance) / 2
            ends.append((corner[0] + half, corner[1] + half))
        if len(ends) != 2:
            logger.debug("Skipping connection %s-%s without two placed ends", *connection.pair)
            continue
        (x1, y1), (x2, y2) = ends
        rendered.append(RenderedConnection(
            source=connection.source,
            target=connection.target,
            type=connection.type,
            path=connection_path(x1, y1, x2, y2, connection.type),
            label=connection.type.label,
            label_at=label_anchor(x1, y1, x2, y2),
        ))
    return rendered

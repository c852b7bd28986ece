"""Pointer-stream handling for one canvas.

An ``InteractionController`` turns pointer down/move/up samples into
position changes for exactly one target at a time: a community card, the
loose end of a connection being drawn, a map marker, or a topic tag.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from simap.application.connection_editor import ConnectionEditor, PendingClassification
from simap.application.diagram_state import DiagramState
from simap.domain.entities import CoordinateSystem
from simap.domain.errors import ConflictError, NotFoundError, ValidationError
from simap.domain.geometry import Pointer, Rect, clamp
from simap.domain.strategies import Point

logger = logging.getLogger(__name__)

# Room kept free under a card for its topic tags
TOPIC_TAG_MARGIN = 30.0


class DragTarget(str, Enum):
    CARD = "card"
    MARKER = "marker"
    CONNECTION = "connection"
    TOPIC = "topic"


class PointerCapture(Protocol):
    """UI hook that routes a pointer's events to one element while dragging."""

    def capture(self, element_id: str, pointer_id: Optional[int]) -> None: ...

    def release(self, element_id: str, pointer_id: Optional[int]) -> None: ...


class NullPointerCapture:
    def capture(self, element_id: str, pointer_id: Optional[int]) -> None:
        return

    def release(self, element_id: str, pointer_id: Optional[int]) -> None:
        return


@dataclass
class DragState:
    """Everything captured at pointer-down that later moves are measured against."""

    target: DragTarget
    target_id: str
    container: Rect
    pointer_id: Optional[int] = None
    offset_x: float = 0.0
    offset_y: float = 0.0
    element_width: float = 0.0
    element_height: float = 0.0
    bottom_margin: float = 0.0
    topic_id: Optional[str] = None
    placed_id: Optional[str] = None


@dataclass
class TopicDrop:
    """Outcome of a topic drag: what happened to which placement."""

    action: str  # "placed", "moved", "removed" or "discarded"
    placed_id: Optional[str] = None
    community_id: Optional[str] = None


class InteractionController:
    """Owns the drag and connection-drawing trackers of one canvas."""

    def __init__(
        self,
        state: DiagramState,
        editor: ConnectionEditor | None = None,
        capture: PointerCapture | None = None,
    ) -> None:
        self._state = state
        self.editor = editor or ConnectionEditor(state)
        self._capture = capture or NullPointerCapture()
        self.drag: Optional[DragState] = None
        self.hovered_id: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.drag is not None

    def _begin(self, drag: DragState) -> DragState:
        if self.drag is not None:
            raise ConflictError(f"A {self.drag.target.value} drag is already in progress")
        self.drag = drag
        self._capture.capture(drag.target_id, drag.pointer_id)
        return drag

    # --------------- Pointer down ---------------
    def begin_card_drag(
        self,
        entity_id: str,
        pointer: Pointer,
        element: Rect,
        container: Rect,
        bottom_margin: float = 0.0,
    ) -> DragState:
        """Start moving a card; pass ``TOPIC_TAG_MARGIN`` when tags render below cards."""
        self._state.get_entity(entity_id)
        return self._begin(DragState(
            target=DragTarget.CARD,
            target_id=entity_id,
            container=container,
            pointer_id=pointer.pointer_id,
            offset_x=pointer.client_x - element.left,
            offset_y=pointer.client_y - element.top,
            element_width=element.width,
            element_height=element.height,
            bottom_margin=bottom_margin,
        ))

    def begin_marker_drag(self, entity_id: str, pointer: Pointer, element: Rect, container: Rect) -> DragState:
        """Start moving a map marker; only sessions stored as container fractions have markers."""
        if self._state.session.coordinate_system is not CoordinateSystem.NORMALIZED:
            raise ValidationError("Map markers require normalized coordinates")
        drag = self.begin_card_drag(entity_id, pointer, element, container)
        drag.target = DragTarget.MARKER
        return drag

    def begin_connection(self, entity_id: str, pointer: Pointer, element: Rect, container: Rect) -> DragState:
        """Start drawing a connection out of a card's centre."""
        center_x, center_y = element.center
        origin = (center_x - container.left, center_y - container.top)
        drag = DragState(
            target=DragTarget.CONNECTION,
            target_id=entity_id,
            container=container,
            pointer_id=pointer.pointer_id,
        )
        if self.drag is not None:
            raise ConflictError(f"A {self.drag.target.value} drag is already in progress")
        self.editor.start(entity_id, origin, pointer.pointer_id)
        return self._begin(drag)

    def begin_topic_drag(
        self,
        pointer: Pointer,
        container: Rect,
        topic_id: Optional[str] = None,
        placed_id: Optional[str] = None,
    ) -> DragState:
        """Drag a new topic out of the panel (``topic_id``) or an existing tag off a card (``placed_id``)."""
        if (topic_id is None) == (placed_id is None):
            raise ValidationError("Give exactly one of topic_id or placed_id")
        if placed_id is not None:
            placed = next((p for p in self._state.placed_topics if p.id == placed_id), None)
            if placed is None:
                raise NotFoundError(f"Placed topic not found: {placed_id}")
            topic_id = placed.topic_id
        return self._begin(DragState(
            target=DragTarget.TOPIC,
            target_id=placed_id or topic_id,
            container=container,
            pointer_id=pointer.pointer_id,
            topic_id=topic_id,
            placed_id=placed_id,
        ))

    # --------------- Pointer move ---------------
    def _clamped_position(self, pointer: Pointer) -> Point:
        drag = self.drag
        box = drag.container
        x = pointer.client_x - box.left - drag.offset_x
        y = pointer.client_y - box.top - drag.offset_y
        x = clamp(x, 0.0, box.width - drag.element_width)
        y = clamp(y, 0.0, box.height - drag.element_height - drag.bottom_margin)
        return (x, y)

    def pointer_move(self, pointer: Pointer, hovered_id: Optional[str] = None) -> Optional[Point]:
        """Apply one move sample.

        Returns the new top-left in container pixels for card and marker
        drags, the preview end point while drawing, and None otherwise.
        ``hovered_id`` is the card under the pointer, used to highlight drop
        targets during topic drags.
        """
        drag = self.drag
        if drag is None:
            return None

        if drag.target is DragTarget.CONNECTION:
            point = (pointer.client_x - drag.container.left, pointer.client_y - drag.container.top)
            self.editor.track(*point)
            return point

        if drag.target is DragTarget.TOPIC:
            self.hovered_id = hovered_id
            return None

        x, y = self._clamped_position(pointer)
        if self._state.session.coordinate_system is CoordinateSystem.NORMALIZED:
            self._state.move_entity(drag.target_id, x / drag.container.width,
                                    y / drag.container.height, notify=False)
        else:
            self._state.move_entity(drag.target_id, x, y, notify=False)
        return (x, y)

    # --------------- Pointer up ---------------
    def pointer_up(self, pointer: Pointer, target_id: Optional[str] = None):
        """End the active drag.

        ``target_id`` is the card under the pointer at release, if any. Card
        and marker drags keep their last clamped position and request a save.
        Connection drags return the ``PendingClassification`` (or None when
        aborted); topic drags return a ``TopicDrop``.
        """
        drag = self.drag
        if drag is None:
            return None
        self.drag = None
        self.hovered_id = None
        self._capture.release(drag.target_id, drag.pointer_id)

        if drag.target is DragTarget.CONNECTION:
            return self._finish_connection(target_id)
        if drag.target is DragTarget.TOPIC:
            return self._finish_topic(drag, target_id)
        self._state.notify_changed()
        return None

    def _finish_connection(self, target_id: Optional[str]) -> Optional[PendingClassification]:
        pending = self.editor.release(target_id)
        if pending is None:
            logger.debug("Connection drawing aborted")
        return pending

    def _finish_topic(self, drag: DragState, target_id: Optional[str]) -> TopicDrop:
        if drag.placed_id is None:
            if target_id is None:
                return TopicDrop(action="discarded")
            placed = self._state.assign_topic(target_id, drag.topic_id)
            return TopicDrop(action="placed", placed_id=placed.id, community_id=target_id)

        self._state.move_placed_topic(drag.placed_id, target_id)
        if target_id is None:
            return TopicDrop(action="removed", placed_id=drag.placed_id)
        return TopicDrop(action="moved", placed_id=drag.placed_id, community_id=target_id)

    def cancel(self) -> None:
        """Abandon the active drag; positions already applied are kept."""
        if self.drag is not None:
            self._capture.release(self.drag.target_id, self.drag.pointer_id)
        self.drag = None
        self.hovered_id = None
        self.editor.cancel()

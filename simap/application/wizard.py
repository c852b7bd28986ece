"""The survey's step flow as an explicit state machine.

Each step is a tagged value; moving to a step records it on the session,
asks for a save, and dispatches to the one view registered for it.
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Tuple

from simap.application.connection_editor import RenderedConnection, render_connections
from simap.application.diagram_state import DiagramState
from simap.application.layout_service import (
    SizeOf,
    ViewportFit,
    card_size,
    fit_to_viewport,
    seed_positions,
)
from simap.domain.entities import TOTAL_STEPS, CoordinateSystem, Entity
from simap.domain.errors import ConflictError, ValidationError
from simap.domain.migrations import convert_coordinates
from simap.domain.specifications import EntityHasImportance, filter_by_specification

logger = logging.getLogger(__name__)

MIN_COMMUNITIES = 3


class Step(IntEnum):
    LANDING = 0
    COMMUNITIES = 1
    DETAILS = 2
    TOPICS = 3
    POSITION = 4
    DISCOURSE = 5
    COMPLETE = 6

    @property
    def uses_canvas(self) -> bool:
        return self in (Step.TOPICS, Step.POSITION, Step.DISCOURSE)


View = Callable[["Wizard"], Any]


class Wizard:
    """Drives a ``DiagramState`` through the survey steps."""

    def __init__(
        self,
        state: DiagramState,
        views: Optional[Dict[Step, View]] = None,
        request_save: Callable[[], None] | None = None,
        size_of: SizeOf = card_size,
    ) -> None:
        self.state = state
        self._views: Dict[Step, View] = dict(views or {})
        self._request_save = request_save
        self._size_of = size_of

    @property
    def step(self) -> Step:
        try:
            return Step(self.state.session.current_step)
        except ValueError:
            logger.warning("Unknown stored step %r, restarting at landing", self.state.session.current_step)
            return Step.LANDING

    @property
    def progress(self) -> float:
        """Fraction of the progress bar filled; the landing page has none."""
        if self.step is Step.LANDING:
            return 0.0
        return (self.step - 1) / (TOTAL_STEPS - 1)

    def register_view(self, step: Step, view: View) -> None:
        self._views[step] = view

    # --------------- Gating ---------------
    def can_advance(self) -> bool:
        """Whether "next" is enabled on the current step."""
        communities = self.state.entities
        if self.step is Step.COMMUNITIES:
            return len(communities) >= MIN_COMMUNITIES
        if self.step is Step.DETAILS:
            return len(filter_by_specification(communities, EntityHasImportance())) == len(communities)
        return self.step is not Step.COMPLETE

    # --------------- Navigation ---------------
    def go_to(self, step: Step | int) -> Any:
        """Enter ``step`` and return whatever its view produced."""
        try:
            step = Step(step)
        except ValueError:
            raise ValidationError(f"No such step: {step!r}")
        self.state.session.current_step = int(step)
        if self._request_save is not None:
            self._request_save()
        view = self._views.get(step)
        return view(self) if view is not None else None

    def next(self) -> Any:
        if not self.can_advance():
            raise ValidationError(f"Step {self.step.name.lower()} is not complete")
        return self.go_to(self.step + 1)

    def back(self) -> Any:
        if self.step <= Step.COMMUNITIES:
            return self.go_to(Step.LANDING)
        return self.go_to(self.step - 1)

    def resume(self) -> Any:
        """Re-enter the stored step after a load, if the respondent had started."""
        if self.state.entities and self.step is not Step.LANDING:
            return self.go_to(self.step)
        return None

    # --------------- Step helpers ---------------
    def add_community(self, name: str) -> Optional[Entity]:
        """Add a community from the text box; duplicates and blanks are ignored."""
        try:
            return self.state.add_entity(name)
        except (ConflictError, ValidationError) as e:
            logger.debug("Community not added: %s", e)
            return None

    def prepare_canvas(self, width: float, height: float) -> list[str]:
        """Seed positions for unplaced communities before a canvas step renders."""
        placed = seed_positions(self.state.session, width, height, self._size_of)
        if placed:
            self.state.notify_changed()
        return placed

    def summary_view(
        self,
        container_width: float,
        container_height: float,
        canvas_width: Optional[float] = None,
        canvas_height: Optional[float] = None,
    ) -> Tuple[ViewportFit, List[RenderedConnection]]:
        """Fitted read-only view for the completion step.

        Sessions stored as fractions need the size of the canvas they were
        arranged on (``canvas_width``/``canvas_height``) to recover pixels.
        """
        session = self.state.session
        if session.coordinate_system is CoordinateSystem.NORMALIZED:
            if canvas_width is None or canvas_height is None:
                raise ValidationError("Canvas size is required for normalized sessions")
            session = convert_coordinates(session, CoordinateSystem.ABSOLUTE, canvas_width, canvas_height)
        fit = fit_to_viewport(session, container_width, container_height, self._size_of)
        return fit, render_connections(session, self._size_of, positions=fit.positions)

    def summary(self) -> Dict[str, int]:
        session = self.state.session
        return {
            "communities": len(session.communities),
            "connections": len(session.connections),
            "topics": len(session.placed_topics),
        }

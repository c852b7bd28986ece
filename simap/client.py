"""Assembles the respondent-side pieces for one session."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from simap.application.diagram_state import DiagramState
from simap.application.drag_controller import InteractionController, PointerCapture
from simap.application.wizard import Step, View, Wizard
from simap.domain.entities import generate_id
from simap.domain.events import DomainEventPublisher
from simap.services.sync import SessionSync

logger = logging.getLogger(__name__)


@dataclass
class SurveyClient:
    sync: SessionSync
    state: DiagramState
    wizard: Wizard
    canvas: InteractionController

    @property
    def session_id(self) -> str:
        return self.sync.session_id

    def close(self) -> None:
        """Write out any save still waiting on the debounce timer."""
        self.sync.flush()


def new_session_id() -> str:
    return generate_id("sim_")


def open_survey(
    session_id: Optional[str] = None,
    sync: Optional[SessionSync] = None,
    views: Optional[Dict[Step, View]] = None,
    capture: Optional[PointerCapture] = None,
    publisher: Optional[DomainEventPublisher] = None,
) -> SurveyClient:
    """Load (or start) a session and wire every mutation to the debounced autosave."""
    if sync is None:
        from simap.dependencies import get_session_sync

        sync = get_session_sync(session_id or new_session_id())
    session = sync.load()
    state = DiagramState(session, publisher=publisher, on_change=sync.request_save)
    wizard = Wizard(state, views=views, request_save=sync.request_save)
    canvas = InteractionController(state, capture=capture)
    logger.info("Opened session %s at step %s", sync.session_id, wizard.step.name.lower())
    wizard.resume()
    return SurveyClient(sync=sync, state=state, wizard=wizard, canvas=canvas)

"""Tests for pointer-driven dragging on the canvas."""
from __future__ import annotations

from unittest.mock import Mock

import pytest

from simap.application.connection_editor import PendingClassification
from simap.application.diagram_state import DiagramState
from simap.application.drag_controller import TOPIC_TAG_MARGIN, DragTarget, InteractionController
from simap.domain.entities import CoordinateSystem, Session
from simap.domain.errors import ConflictError, NotFoundError, ValidationError
from simap.domain.geometry import Pointer, Rect, hit_test

CONTAINER = Rect(left=100, top=50, width=800, height=600)


@pytest.fixture
def controller(state):
    return InteractionController(state)


def card_rect(entity, size=100):
    return Rect(CONTAINER.left + entity.x, CONTAINER.top + entity.y, size, size)


class TestCardDrag:
    """Test dragging community cards."""

    def test_follows_pointer_keeping_grab_offset(self, controller, state, three_communities):
        family = three_communities[0]
        state.move_entity(family.id, 200, 100)

        controller.begin_card_drag(family.id, Pointer(320, 170), card_rect(family), CONTAINER)
        position = controller.pointer_move(Pointer(420, 270))

        assert position == (300, 200)
        assert (family.x, family.y) == (300, 200)

    @pytest.mark.parametrize("pointer", [
        Pointer(-5000, -5000), Pointer(5000, 5000), Pointer(-10, 9000), Pointer(640, 99999),
    ])
    def test_clamped_to_container(self, controller, state, three_communities, pointer):
        """Test a card never leaves the container, tag margin included."""
        family = three_communities[0]
        state.move_entity(family.id, 0, 0)
        controller.begin_card_drag(family.id, Pointer(110, 60), card_rect(family), CONTAINER,
                                   bottom_margin=TOPIC_TAG_MARGIN)

        controller.pointer_move(pointer)

        assert 0 <= family.x <= 800 - 100
        assert 0 <= family.y <= 600 - 100 - TOPIC_TAG_MARGIN

    def test_moves_do_not_save_until_release(self):
        on_change = Mock()
        state = DiagramState(Session(session_id="sim_1"), on_change=on_change)
        entity = state.add_entity("Family")
        state.move_entity(entity.id, 0, 0)
        controller = InteractionController(state)
        on_change.reset_mock()

        controller.begin_card_drag(entity.id, Pointer(150, 100), card_rect(entity), CONTAINER)
        for step in range(5):
            controller.pointer_move(Pointer(150 + step * 10, 100))
        assert on_change.call_count == 0

        controller.pointer_up(Pointer(190, 100))
        assert on_change.call_count == 1
        assert not controller.active

    def test_one_drag_at_a_time(self, controller, state, three_communities):
        family, work, _ = three_communities
        state.move_entity(family.id, 0, 0)
        state.move_entity(work.id, 200, 0)
        controller.begin_card_drag(family.id, Pointer(110, 60), card_rect(family), CONTAINER)

        with pytest.raises(ConflictError):
            controller.begin_card_drag(work.id, Pointer(310, 60), card_rect(work), CONTAINER)

    def test_pointer_capture(self, state, three_communities):
        capture = Mock()
        controller = InteractionController(state, capture=capture)
        family = three_communities[0]
        state.move_entity(family.id, 0, 0)

        controller.begin_card_drag(family.id, Pointer(110, 60, pointer_id=7), card_rect(family), CONTAINER)
        controller.pointer_up(Pointer(110, 60, pointer_id=7))

        capture.capture.assert_called_once_with(family.id, 7)
        capture.release.assert_called_once_with(family.id, 7)

    def test_move_without_drag(self, controller):
        assert controller.pointer_move(Pointer(1, 1)) is None
        assert controller.pointer_up(Pointer(1, 1)) is None


class TestMarkerDrag:
    """Test map markers stored as container fractions."""

    def test_marker_positions_are_fractions(self):
        state = DiagramState(Session(session_id="sim_1", coordinate_system=CoordinateSystem.NORMALIZED))
        entity = state.add_entity("Family")
        state.move_entity(entity.id, 0.5, 0.5)
        controller = InteractionController(state)
        marker = Rect(CONTAINER.left + 400, CONTAINER.top + 300, 20, 20)

        drag = controller.begin_marker_drag(entity.id, Pointer(510, 360), marker, CONTAINER)
        controller.pointer_move(Pointer(10000, 10000))

        assert drag.target is DragTarget.MARKER
        assert entity.x == pytest.approx(780 / 800)
        assert entity.y == pytest.approx(580 / 600)

    def test_marker_requires_normalized_session(self, controller, state, three_communities):
        family = three_communities[0]
        state.move_entity(family.id, 0, 0)
        with pytest.raises(ValidationError):
            controller.begin_marker_drag(family.id, Pointer(0, 0), card_rect(family), CONTAINER)


class TestConnectionDrag:
    """Test drawing connections with the pointer."""

    def test_draw_to_other_card(self, controller, state, three_communities):
        family, work, _ = three_communities
        state.move_entity(family.id, 0, 0)
        state.move_entity(work.id, 300, 0)

        controller.begin_connection(family.id, Pointer(150, 100), card_rect(family), CONTAINER)
        assert controller.editor.drawing.start == (50, 50)
        assert controller.pointer_move(Pointer(400, 100)) == (300, 50)

        pending = controller.pointer_up(Pointer(450, 100), target_id=work.id)

        assert isinstance(pending, PendingClassification)
        assert {pending.source, pending.target} == {family.id, work.id}
        controller.editor.choose("easy")
        assert len(state.connections) == 1

    def test_release_on_canvas(self, controller, state, three_communities):
        family = three_communities[0]
        state.move_entity(family.id, 0, 0)
        controller.begin_connection(family.id, Pointer(150, 100), card_rect(family), CONTAINER)

        assert controller.pointer_up(Pointer(700, 500)) is None
        assert state.connections == []

    def test_cancel(self, controller, state, three_communities):
        family = three_communities[0]
        state.move_entity(family.id, 0, 0)
        controller.begin_connection(family.id, Pointer(150, 100), card_rect(family), CONTAINER)

        controller.cancel()

        assert not controller.active
        assert controller.editor.drawing is None


class TestTopicDrag:
    """Test dragging topics onto and between cards."""

    def test_drop_new_topic_on_card(self, controller, state, three_communities):
        family = three_communities[0]
        controller.begin_topic_drag(Pointer(0, 0), CONTAINER, topic_id="sports")
        controller.pointer_move(Pointer(10, 10), hovered_id=family.id)
        assert controller.hovered_id == family.id

        drop = controller.pointer_up(Pointer(10, 10), target_id=family.id)

        assert drop.action == "placed"
        assert drop.community_id == family.id
        assert [p.topic_id for p in state.topics_for(family.id)] == ["sports"]
        assert controller.hovered_id is None

    def test_drop_new_topic_on_canvas(self, controller, state):
        controller.begin_topic_drag(Pointer(0, 0), CONTAINER, topic_id="sports")
        assert controller.pointer_up(Pointer(10, 10)).action == "discarded"
        assert state.placed_topics == []

    def test_move_tag_between_cards(self, controller, state, three_communities):
        family, work, _ = three_communities
        placed = state.assign_topic(family.id, "local")

        controller.begin_topic_drag(Pointer(0, 0), CONTAINER, placed_id=placed.id)
        drop = controller.pointer_up(Pointer(5, 5), target_id=work.id)

        assert drop.action == "moved"
        assert placed.community_id == work.id

    def test_drag_tag_off_card_removes_it(self, controller, state, three_communities):
        placed = state.assign_topic(three_communities[0].id, "local")

        controller.begin_topic_drag(Pointer(0, 0), CONTAINER, placed_id=placed.id)
        drop = controller.pointer_up(Pointer(5, 5))

        assert drop.action == "removed"
        assert state.placed_topics == []

    def test_needs_exactly_one_source(self, controller):
        with pytest.raises(ValidationError):
            controller.begin_topic_drag(Pointer(0, 0), CONTAINER)
        with pytest.raises(ValidationError):
            controller.begin_topic_drag(Pointer(0, 0), CONTAINER, topic_id="local", placed_id="pt_1")

    def test_unknown_placed_topic(self, controller):
        with pytest.raises(NotFoundError):
            controller.begin_topic_drag(Pointer(0, 0), CONTAINER, placed_id="pt_missing")


class TestHitTest:
    def test_topmost_wins(self):
        rects = {"a": Rect(0, 0, 100, 100), "b": Rect(50, 50, 100, 100)}
        assert hit_test(rects, 75, 75) == "b"
        assert hit_test(rects, 10, 10) == "a"
        assert hit_test(rects, 500, 500) is None

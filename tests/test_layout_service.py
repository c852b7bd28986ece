"""Tests for ring seeding and the fitted summary view."""
from __future__ import annotations

import math

import pytest

from simap.application.layout_service import card_size, fit_to_viewport, seed_positions
from simap.domain.entities import CoordinateSystem, Entity, Importance, PlacedTopic, Session
from simap.domain.errors import ValidationError


def session_with(*entities, **kwargs):
    return Session(session_id="sim_1", communities=list(entities), **kwargs)


class TestCardSize:
    def test_sizes(self):
        assert card_size(Importance.HIGH) == 130
        assert card_size(Importance.MEDIUM) == 100
        assert card_size(Importance.LOW) == 75
        assert card_size(None) == 100


class TestSeedPositions:
    """Test ring placement of unplaced communities."""

    def test_ring(self):
        """Test card centres sit on a circle around the canvas centre."""
        session = session_with(
            Entity("c_1", "A"), Entity("c_2", "B", importance=Importance.HIGH), Entity("c_3", "C"),
            Entity("c_4", "D", importance=Importance.LOW),
        )

        placed = seed_positions(session, 800, 600)

        assert placed == ["c_1", "c_2", "c_3", "c_4"]
        radius = 150
        for entity in session.communities:
            half = card_size(entity.importance) / 2
            cx, cy = entity.x + half, entity.y + half
            assert math.isclose(math.hypot(cx - 400, cy - 300), radius)

    def test_first_slot_at_angle_zero(self):
        session = session_with(Entity("c_1", "A"), Entity("c_2", "B"))
        seed_positions(session, 800, 600)

        first = session.communities[0]
        assert (first.x, first.y) == (400 + 150 - 50, 300 - 50)

    def test_placed_entities_kept(self):
        """Test seeding never moves a card that already has a spot."""
        session = session_with(Entity("c_1", "A", x=5, y=6), Entity("c_2", "B"))

        placed = seed_positions(session, 800, 600)

        assert placed == ["c_2"]
        assert (session.communities[0].x, session.communities[0].y) == (5, 6)

    def test_normalized(self):
        session = session_with(Entity("c_1", "A"), coordinate_system=CoordinateSystem.NORMALIZED)
        seed_positions(session, 800, 600)

        entity = session.communities[0]
        assert 0 <= entity.x <= 1
        assert math.isclose(entity.x, 500 / 800)
        assert math.isclose(entity.y, 250 / 600)

    def test_bad_size(self):
        with pytest.raises(ValidationError):
            seed_positions(session_with(Entity("c_1", "A")), 0, 600)


class TestFitToViewport:
    """Test the summary view transform."""

    def test_empty(self):
        fit = fit_to_viewport(session_with(Entity("c_1", "A")), 800, 600)
        assert fit.scale == 1.0
        assert fit.positions == {}

    def test_small_content_not_enlarged(self):
        """Test content smaller than the container keeps scale 1 and is centred."""
        session = session_with(Entity("c_1", "A", x=300, y=200))

        fit = fit_to_viewport(session, 800, 600)

        assert fit.scale == 1.0
        assert fit.content_width == 100 + 40
        assert fit.offset_x == (800 - 140) / 2
        assert fit.positions == {"c_1": (20, 20)}

    def test_large_content_shrinks(self):
        session = session_with(
            Entity("c_1", "A", x=0, y=0),
            Entity("c_2", "B", x=1900, y=0),
        )

        fit = fit_to_viewport(session, 500, 600)

        assert fit.content_width == 2000 + 40
        assert math.isclose(fit.scale, 500 / 2040)
        assert fit.content_width * fit.scale <= 500

    def test_topic_rows_count_towards_height(self):
        session = session_with(
            Entity("c_1", "A", x=0, y=0),
            placed_topics=[PlacedTopic(f"pt_{i}", "local", "c_1") for i in range(3)],
        )

        fit = fit_to_viewport(session, 800, 600)

        # 100 card + 2 rows of tags (2 * 24 + 8) + padding
        assert fit.content_height == 100 + 56 + 40

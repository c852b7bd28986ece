"""Tests for load-time session upgrades and coordinate conversion."""
from __future__ import annotations

import pytest

from simap.domain.entities import SCHEMA_VERSION, CoordinateSystem, Session
from simap.domain.errors import ValidationError
from simap.domain.migrations import attach_legacy_topics, convert_coordinates, upgrade_session


def legacy_document():
    return {
        "sessionId": "sim_old",
        "currentStep": 4,
        "tutorialStep3Shown": True,
        "communities": [
            {"id": "c_a", "name": "Family", "importance": "high", "x": 100, "y": 100},
            {"id": "c_b", "name": "Work", "importance": "low", "x": 600, "y": 400},
            {"id": "c_c", "name": "Church"},
        ],
        "placedTopics": [
            {"id": "pt_1", "topicId": "local", "x": 170, "y": 160},
            {"id": "pt_2", "topicId": "business", "x": 640, "y": 450},
        ],
    }


class TestUpgradeSession:
    """Test schema upgrades."""

    def test_untagged_becomes_absolute(self):
        """Test a legacy document is tagged once and bumped to the current schema."""
        session = Session.from_dict(legacy_document())

        upgraded = upgrade_session(session)

        assert upgraded is not session
        assert upgraded.schema_version == SCHEMA_VERSION
        assert upgraded.coordinate_system is CoordinateSystem.ABSOLUTE
        assert upgraded.to_dict()["coordinateSystem"] == "absolute"

    def test_positions_unchanged(self):
        upgraded = upgrade_session(Session.from_dict(legacy_document()))
        family = upgraded.communities[0]
        assert (family.x, family.y) == (100, 100)

    def test_legacy_topics_snap_to_nearest_card(self):
        """Test free-floating topic points attach to the closest card centre."""
        upgraded = upgrade_session(Session.from_dict(legacy_document()))

        homes = {p.id: p.community_id for p in upgraded.placed_topics}
        assert homes == {"pt_1": "c_a", "pt_2": "c_b"}
        assert "legacyPlacedTopics" not in upgraded.extra

    def test_tutorial_flags_renamed(self):
        upgraded = upgrade_session(Session.from_dict(legacy_document()))
        assert upgraded.extra.get("tutorialPositionShown") is True
        assert "tutorialStep3Shown" not in upgraded.extra

    def test_current_session_untouched(self):
        """Test an up-to-date session is returned as is."""
        session = Session(session_id="sim_new")
        assert upgrade_session(session) is session

    def test_input_not_mutated(self):
        session = Session.from_dict(legacy_document())
        upgrade_session(session)
        assert session.schema_version == 1
        assert session.placed_topics == []

    def test_topics_dropped_without_placed_cards(self):
        session = Session.from_dict({
            "communities": [{"id": "c_a", "name": "Family"}],
            "placedTopics": [{"id": "pt_1", "topicId": "local", "x": 5, "y": 5}],
        })
        assert attach_legacy_topics(session).placed_topics == []

    def test_bad_legacy_coordinates_dropped(self):
        """Test a legacy topic point without usable coordinates is discarded."""
        document = legacy_document()
        document["placedTopics"].append({"id": "pt_3", "topicId": "sports", "x": "left", "y": 3})

        upgraded = upgrade_session(Session.from_dict(document))

        assert sorted(p.id for p in upgraded.placed_topics) == ["pt_1", "pt_2"]


class TestConvertCoordinates:
    """Test conversion between pixels and container fractions."""

    def test_to_normalized(self):
        session = Session.from_dict(legacy_document())

        converted = convert_coordinates(session, CoordinateSystem.NORMALIZED, 800, 500)

        family = converted.communities[0]
        assert (family.x, family.y) == (0.125, 0.2)
        assert converted.communities[2].x is None
        assert converted.coordinate_system is CoordinateSystem.NORMALIZED
        assert session.communities[0].x == 100

    def test_round_trip(self):
        session = Session.from_dict(legacy_document())
        there = convert_coordinates(session, CoordinateSystem.NORMALIZED, 800, 500)
        back = convert_coordinates(there, CoordinateSystem.ABSOLUTE, 800, 500)
        assert (back.communities[1].x, back.communities[1].y) == (600, 400)

    def test_same_system_is_noop(self):
        session = Session(session_id="sim_1")
        assert convert_coordinates(session, CoordinateSystem.ABSOLUTE, 800, 500) is session

    def test_zero_size(self):
        with pytest.raises(ValidationError):
            convert_coordinates(Session(session_id="sim_1"), CoordinateSystem.NORMALIZED, 0, 500)

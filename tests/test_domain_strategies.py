"""Tests for connection path strategies."""
from __future__ import annotations

import math

import pytest

from simap.domain.entities import ConnectionType
from simap.domain.errors import ValidationError
from simap.domain.strategies import (
    JaggedPathStrategy,
    PathStrategyFactory,
    StraightPathStrategy,
    WavyPathStrategy,
    connection_path,
    label_anchor,
)


class TestPathStrategyFactory:
    """Test path strategy factory."""

    def test_get_easy_strategy(self):
        strategy = PathStrategyFactory.get_strategy(ConnectionType.EASY)
        assert isinstance(strategy, StraightPathStrategy)
        assert strategy.get_type_name() == "easy"

    def test_get_moderate_strategy(self):
        strategy = PathStrategyFactory.get_strategy("moderate")
        assert isinstance(strategy, WavyPathStrategy)

    def test_get_difficult_strategy(self):
        strategy = PathStrategyFactory.get_strategy("difficult")
        assert isinstance(strategy, JaggedPathStrategy)

    def test_unknown_type(self):
        """Test unknown connection type raises error."""
        with pytest.raises(ValidationError, match="Unknown connection type"):
            PathStrategyFactory.get_strategy("bumpy")

    def test_register_strategy(self):
        """Test a replacement strategy is picked up."""
        class Custom(StraightPathStrategy):
            pass

        PathStrategyFactory.register_strategy(ConnectionType.EASY, Custom)
        try:
            assert isinstance(PathStrategyFactory.get_strategy("easy"), Custom)
        finally:
            PathStrategyFactory.register_strategy(ConnectionType.EASY, StraightPathStrategy)


class TestPathEndpoints:
    """Every path starts and ends at the requested points."""

    @pytest.mark.parametrize("kind", list(ConnectionType))
    @pytest.mark.parametrize("points", [
        (0, 0, 300, 0),
        (10, 20, 13, 24),
        (500, 400, 120, 80),
        (0, 0, 0, 1),
    ])
    def test_endpoints(self, kind, points):
        path = connection_path(*points, kind)
        x1, y1, x2, y2 = points
        assert path.start == (x1, y1)
        assert path.end == (x2, y2)
        assert path.type is kind

    @pytest.mark.parametrize("kind", list(ConnectionType))
    def test_zero_length(self, kind):
        """Test coincident points fall back to a straight segment."""
        path = connection_path(5, 5, 5, 5, kind)
        assert [c.op for c in path.commands] == ["M", "L"]
        assert path.to_svg() == "M 5 5 L 5 5"


class TestStraightPath:
    def test_svg(self):
        path = StraightPathStrategy().build(0, 0, 100, 50)
        assert path.to_svg() == "M 0 0 L 100 50"


class TestWavyPath:
    """Test the moderate (wavy) ribbon."""

    def test_minimum_waves(self):
        """Test short paths still get two full waves."""
        path = WavyPathStrategy().build(0, 0, 60, 0)
        assert len(path.commands) == 1 + 4
        assert [c.op for c in path.commands[1:]] == ["Q", "Q", "Q", "L"]

    def test_wave_count_grows_with_length(self):
        path = WavyPathStrategy().build(0, 0, 250, 0)
        # floor(250 / 50) = 5 waves, 10 half-waves
        assert len(path.commands) == 1 + 10

    def test_control_points_alternate_sides(self):
        """Test control points sit at the amplitude on alternating sides."""
        path = WavyPathStrategy().build(0, 0, 200, 0)
        offsets = [y for _, y in path.control_points]
        assert all(abs(abs(y) - 15) < 1e-9 for y in offsets)
        assert all(a * b < 0 for a, b in zip(offsets, offsets[1:]))


class TestJaggedPath:
    """Test the difficult (zig-zag) polyline."""

    def test_minimum_segments(self):
        path = JaggedPathStrategy().build(0, 0, 40, 0)
        assert [c.op for c in path.commands] == ["M", "L", "L", "L"]

    def test_vertices_offset_from_line(self):
        path = JaggedPathStrategy().build(0, 0, 300, 0)
        inner = path.vertices[1:-1]
        assert len(inner) == 9
        assert all(math.isclose(abs(y), 12) for _, y in inner)
        assert inner[0][1] < 0 < inner[1][1]

    def test_diagonal_offset_is_perpendicular(self):
        path = JaggedPathStrategy().build(0, 0, 90, 90)
        x, y = path.vertices[1]
        t = 1 / 4
        dx, dy = x - 90 * t, y - 90 * t
        assert math.isclose(dx + dy, 0, abs_tol=1e-9)
        assert math.isclose(math.hypot(dx, dy), 12)


class TestLabelAnchor:
    def test_midpoint(self):
        assert label_anchor(0, 0, 100, 40) == (50, 20)

"""Strategy pattern for connection path rendering.

Each connection type maps to a strategy that turns two centre points into a
drawable path. The same strategies draw the live preview and committed
connections, so a path never changes shape when a drag is released.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Protocol, Tuple

from simap.domain.entities import ConnectionType
from simap.domain.errors import ValidationError

Point = Tuple[float, float]


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass
class PathCommand:
    """One SVG path command: ``M``/``L`` carry one point, ``Q`` a control point and an end point."""

    op: str
    points: List[Point]

    def to_svg(self) -> str:
        coords = " ".join(f"{_fmt(x)} {_fmt(y)}" for x, y in self.points)
        return f"{self.op} {coords}"


@dataclass
class ConnectionPath:
    """Drawable description of a connection between two points."""

    type: ConnectionType
    commands: List[PathCommand] = field(default_factory=list)

    @property
    def vertices(self) -> List[Point]:
        """Points the path passes through, in order (control points excluded)."""
        return [command.points[-1] for command in self.commands]

    @property
    def control_points(self) -> List[Point]:
        return [command.points[0] for command in self.commands if command.op == "Q"]

    @property
    def start(self) -> Point:
        return self.vertices[0]

    @property
    def end(self) -> Point:
        return self.vertices[-1]

    def to_svg(self) -> str:
        return " ".join(command.to_svg() for command in self.commands)


class PathStrategy(Protocol):
    """Protocol for connection path strategies."""

    def build(self, x1: float, y1: float, x2: float, y2: float) -> ConnectionPath:
        """Build the path from (x1, y1) to (x2, y2)."""
        ...

    def get_type_name(self) -> str:
        """Return the connection type this strategy draws."""
        ...


def _straight(kind: ConnectionType, x1: float, y1: float, x2: float, y2: float) -> ConnectionPath:
    return ConnectionPath(kind, [PathCommand("M", [(x1, y1)]), PathCommand("L", [(x2, y2)])])


def _normal(dx: float, dy: float, dist: float, offset: float) -> Point:
    return (-dy / dist * offset, dx / dist * offset)


class StraightPathStrategy:
    """Straight segment; used for easy connections and the drawing preview."""

    def build(self, x1: float, y1: float, x2: float, y2: float) -> ConnectionPath:
        return _straight(ConnectionType.EASY, x1, y1, x2, y2)

    def get_type_name(self) -> str:
        return ConnectionType.EASY.value


class WavyPathStrategy:
    """Sinusoidal ribbon of quadratic half-waves for moderate connections."""

    def __init__(self, amplitude: float = 15, wavelength: float = 50, min_waves: int = 2) -> None:
        self.amplitude = amplitude
        self.wavelength = wavelength
        self.min_waves = min_waves

    def build(self, x1: float, y1: float, x2: float, y2: float) -> ConnectionPath:
        dx, dy = x2 - x1, y2 - y1
        dist = math.hypot(dx, dy)
        if dist == 0:
            return _straight(ConnectionType.MODERATE, x1, y1, x2, y2)

        half_waves = max(self.min_waves, math.floor(dist / self.wavelength)) * 2
        path = ConnectionPath(ConnectionType.MODERATE, [PathCommand("M", [(x1, y1)])])
        for i in range(1, half_waves + 1):
            if i == half_waves:
                path.commands.append(PathCommand("L", [(x2, y2)]))
                break
            t = i / half_waves
            perp_x, perp_y = _normal(dx, dy, dist, self.amplitude * (1 if i % 2 == 0 else -1))
            control = (x1 + dx * t + perp_x, y1 + dy * t + perp_y)
            t_end = t + 0.5 / half_waves
            path.commands.append(PathCommand("Q", [control, (x1 + dx * t_end, y1 + dy * t_end)]))
        return path

    def get_type_name(self) -> str:
        return ConnectionType.MODERATE.value


class JaggedPathStrategy:
    """Zig-zag polyline for difficult connections."""

    def __init__(self, amplitude: float = 12, segment_length: float = 30, min_segments: int = 3) -> None:
        self.amplitude = amplitude
        self.segment_length = segment_length
        self.min_segments = min_segments

    def build(self, x1: float, y1: float, x2: float, y2: float) -> ConnectionPath:
        dx, dy = x2 - x1, y2 - y1
        dist = math.hypot(dx, dy)
        if dist == 0:
            return _straight(ConnectionType.DIFFICULT, x1, y1, x2, y2)

        segments = max(self.min_segments, math.floor(dist / self.segment_length))
        path = ConnectionPath(ConnectionType.DIFFICULT, [PathCommand("M", [(x1, y1)])])
        for i in range(1, segments):
            t = i / segments
            perp_x, perp_y = _normal(dx, dy, dist, self.amplitude * (1 if i % 2 == 0 else -1))
            path.commands.append(PathCommand("L", [(x1 + dx * t + perp_x, y1 + dy * t + perp_y)]))
        path.commands.append(PathCommand("L", [(x2, y2)]))
        return path

    def get_type_name(self) -> str:
        return ConnectionType.DIFFICULT.value


class PathStrategyFactory:
    """Factory to select a path strategy based on connection type."""

    _strategies = {
        ConnectionType.EASY: StraightPathStrategy,
        ConnectionType.MODERATE: WavyPathStrategy,
        ConnectionType.DIFFICULT: JaggedPathStrategy,
    }

    @classmethod
    def get_strategy(cls, connection_type: ConnectionType | str) -> PathStrategy:
        """Get the path strategy for a connection type."""
        try:
            kind = ConnectionType(connection_type)
        except ValueError:
            raise ValidationError(f"Unknown connection type: {connection_type!r}")
        return cls._strategies[kind]()

    @classmethod
    def register_strategy(cls, connection_type: ConnectionType, strategy_class: type) -> None:
        """Register a replacement strategy for a connection type."""
        cls._strategies[ConnectionType(connection_type)] = strategy_class


def connection_path(x1: float, y1: float, x2: float, y2: float,
                    connection_type: ConnectionType | str) -> ConnectionPath:
    """Build the path for a connection of ``connection_type`` between two points."""
    return PathStrategyFactory.get_strategy(connection_type).build(x1, y1, x2, y2)


def label_anchor(x1: float, y1: float, x2: float, y2: float) -> Point:
    """Midpoint of the straight line between two points; connection labels centre here."""
    return ((x1 + x2) / 2, (y1 + y2) / 2)

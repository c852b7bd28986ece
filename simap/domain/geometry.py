"""Plain geometry values for pointer input and canvas layout."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Rect:
    """Bounding box in client (viewport) coordinates."""

    left: float
    top: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.left + self.width and self.top <= y <= self.top + self.height


@dataclass(frozen=True)
class Pointer:
    """One pointer sample (mouse, touch or pen)."""

    client_x: float
    client_y: float
    pointer_id: Optional[int] = None


def clamp(value: float, low: float, high: float) -> float:
    """Clamp into ``[low, high]``; ``low`` wins when the range is empty."""
    return max(low, min(value, high))


def hit_test(rects: Dict[str, Rect], x: float, y: float) -> Optional[str]:
    """Id of the topmost (last listed) rectangle containing the point."""
    hit = None
    for key, rect in rects.items():
        if rect.contains(x, y):
            hit = key
    return hit

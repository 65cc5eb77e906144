"""Center-anchored rectangles and the small value types built on them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

# Tolerance for containment tests; edges that coincide up to float noise count
# as covering.
EPSILON = 1e-9


class Size(NamedTuple):
    width: float
    height: float


class Offset(NamedTuple):
    """Translation in unscaled view units."""

    dx: float
    dy: float

    def scaled(self, factor: float) -> "Offset":
        return Offset(self.dx * factor, self.dy * factor)


ZERO_OFFSET = Offset(0.0, 0.0)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle stored as center + size.

    Edges are derived on access. Widths and heights are expected to be
    non-negative; a zero-sized rectangle is a point.
    """

    cx: float
    cy: float
    width: float
    height: float

    @staticmethod
    def from_center(center: tuple[float, float], size: tuple[float, float]) -> "Rect":
        return Rect(float(center[0]), float(center[1]), float(size[0]), float(size[1]))

    @property
    def center(self) -> tuple[float, float]:
        return self.cx, self.cy

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def min_x(self) -> float:
        return self.cx - self.width / 2.0

    @property
    def max_x(self) -> float:
        return self.cx + self.width / 2.0

    @property
    def min_y(self) -> float:
        return self.cy - self.height / 2.0

    @property
    def max_y(self) -> float:
        return self.cy + self.height / 2.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0

    def contains(self, other: "Rect", tol: float = EPSILON) -> bool:
        """Return True if ``other`` lies inside this rectangle, edges inclusive."""
        return (
            self.min_x <= other.min_x + tol
            and other.max_x <= self.max_x + tol
            and self.min_y <= other.min_y + tol
            and other.max_y <= self.max_y + tol
        )

    def offset_by(self, dx: float, dy: float) -> "Rect":
        return Rect(self.cx + dx, self.cy + dy, self.width, self.height)

    def swapped(self) -> "Rect":
        """Same center, width and height exchanged (a quarter turn)."""
        return Rect(self.cx, self.cy, self.height, self.width)

    def scaled_about_center(self, factor: float) -> "Rect":
        return Rect(self.cx, self.cy, self.width * factor, self.height * factor)


__all__ = ["EPSILON", "Offset", "Rect", "Size", "ZERO_OFFSET"]

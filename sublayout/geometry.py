"""Two-dimensional vectors and axis-aligned rectangles."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

INT32_MAX = 2**31 - 1
INT32_MIN = -(2**31)


@dataclass(frozen=True)
class Vector:
    """A point or displacement; coordinates are pixels or 26.6 units."""

    x: float = 0
    y: float = 0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y


@dataclass
class Rect:
    """An axis-aligned box; max edges are exclusive."""

    x_min: int = 0
    y_min: int = 0
    x_max: int = 0
    y_max: int = 0

    @classmethod
    def empty(cls) -> Rect:
        """Return a rectangle ready to accumulate bounds with update()."""
        rect = cls()
        rect.reset()
        return rect

    def reset(self) -> None:
        """Make the rectangle contain nothing, so any update replaces it."""
        self.x_min = self.y_min = INT32_MAX
        self.x_max = self.y_max = INT32_MIN

    def update(self, x_min: int, y_min: int, x_max: int, y_max: int) -> None:
        """Grow the rectangle to also cover the given box."""
        self.x_min = min(self.x_min, x_min)
        self.y_min = min(self.y_min, y_min)
        self.x_max = max(self.x_max, x_max)
        self.y_max = max(self.y_max, y_max)

    def is_empty(self) -> bool:
        return self.x_min >= self.x_max or self.y_min >= self.y_max

    @property
    def width(self) -> int:
        return self.x_max - self.x_min

    @property
    def height(self) -> int:
        return self.y_max - self.y_min

    @property
    def center(self) -> Vector:
        return Vector((self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0)
"""
Curve FN - Type Definitions
"""

from __future__ import annotations
from dataclasses import dataclass
import math
from typing import TypedDict

# ==========================================
# GEOMETRY
# ==========================================

@dataclass(frozen=True, slots=True)
class Point:
    """2D point or vector. Handles are stored as vectors relative to their anchor."""
    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __neg__(self) -> Point:
        return Point(-self.x, -self.y)

    @property
    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def is_zero(self) -> bool:
        return self.x == 0 and self.y == 0

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def with_length(self, length: float) -> Point:
        """Same direction, new length. Zero vectors stay zero."""
        current = self.length
        if current == 0: return self
        return self * (length / current)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


ZERO = Point(0.0, 0.0)


# ==========================================
# SERIALIZED PATH
# ==========================================

class SegmentRecord(TypedDict):
    point: list[float]
    handle_in: list[float]
    handle_out: list[float]


class PathRecord(TypedDict):
    domain_size: float
    segments: list[SegmentRecord]


# ==========================================
# RANDOM TYPE ALIASES AND STUFF
# ==========================================

SegmentID = int
"""Stable segment identity, never reused within a process"""

Range = tuple[float, float]
"""Inclusive (start, end) x-span of one segment in normalized units"""

Milliseconds = float
"""Event timestamps and durations"""

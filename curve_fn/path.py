"""
Curve FN - Path Module

Ordered, x-monotonic chain of anchors with in/out handle vectors.
The first anchor is pinned to x=0 and the last to x=domain_size; neither can be removed.
Segments carry stable ids so selections survive inserts and deletes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, Self

import orjson

from curve_fn import enums as enum
from curve_fn.enums import Part
from curve_fn.errors import EmptyPathError
from curve_fn.types import ZERO, PathRecord, Point, Range, SegmentID, SegmentRecord
from curve_fn.utils import IdGenerator


@dataclass(eq=False, slots=True)
class Segment:
    id: SegmentID
    point: Point
    handle_in: Point = ZERO
    handle_out: Point = ZERO

    def handle(self, side: Part) -> Point:
        if side is Part.HANDLE_IN: return self.handle_in
        if side is Part.HANDLE_OUT: return self.handle_out
        raise ValueError(f"Segment.handle: expected a handle side. Got: {side}")

    def set_handle(self, side: Part, value: Point) -> None:
        if side is Part.HANDLE_IN:
            self.handle_in = value
        elif side is Part.HANDLE_OUT:
            self.handle_out = value
        else:
            raise ValueError(f"Segment.set_handle: expected a handle side. Got: {side}")

    def absolute(self, part: Part) -> Point:
        """Absolute position of the anchor or one of its handles."""
        if part is Part.ANCHOR: return self.point
        return self.point + self.handle(part)

    def is_linear(self) -> bool:
        return self.handle_in.is_zero() and self.handle_out.is_zero()

    def make_linear(self) -> None:
        self.handle_in = ZERO
        self.handle_out = ZERO

    def to_record(self) -> SegmentRecord:
        return {
            "point": [self.point.x, self.point.y],
            "handle_in": [self.handle_in.x, self.handle_in.y],
            "handle_out": [self.handle_out.x, self.handle_out.y],
        }


@dataclass(eq=False)
class Path:
    domain_size: float = 1.0
    segments: list[Segment] = field(default_factory=list)
    _next_id: IdGenerator = field(default_factory=IdGenerator, repr=False)

    def __post_init__(self) -> None:
        if self.domain_size <= 0:
            raise ValueError(f"Path domain_size must be positive (>0). Got: {self.domain_size}")

    @classmethod
    def linear(cls, domain_size: float = 1.0) -> Self:
        """Default diagonal from (0, 0) to (domain_size, domain_size)."""
        path = cls(domain_size)
        path.append(Point(0.0, 0.0))
        path.append(Point(domain_size, domain_size))
        return path

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    # ------------------------------------------------------------------
    # Topology
    # ------------------------------------------------------------------

    def append(self, point: Point, handle_in: Point = ZERO, handle_out: Point = ZERO) -> Segment:
        """Build-time helper: add an anchor to the end of the chain."""
        segment = Segment(self._next_id(), point, handle_in, handle_out)
        self.segments.append(segment)
        return segment

    def insert(self, point: Point) -> Segment:
        """Insert a new anchor right after the nearest anchor with smaller x."""
        if not self.segments:
            raise EmptyPathError("Path has no segments")

        nearest = self.segments[0]
        distance = point.x - nearest.point.x
        for s in self.segments:
            d = point.x - s.point.x
            if 0 < d < distance:
                nearest = s
                distance = d

        segment = Segment(self._next_id(), point)
        self.segments.insert(self.index_of(nearest) + 1, segment)
        return segment

    def remove(self, segment: Segment) -> bool:
        """Remove an interior anchor. Endpoints and unknown segments are ignored."""
        if segment not in self.segments: return False
        if self.is_first(segment) or self.is_last(segment): return False
        self.segments.remove(segment)
        return True

    def segments_in_x_order(self) -> list[Segment]:
        return sorted(self.segments, key=lambda s: s.point.x)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, segment_id: SegmentID) -> Segment | None:
        for s in self.segments:
            if s.id == segment_id: return s
        return None

    def index_of(self, segment: Segment) -> int:
        for i, s in enumerate(self.segments):
            if s is segment: return i
        raise ValueError(f"Segment {segment.id} is not part of this path")

    def is_first(self, segment: Segment) -> bool:
        return bool(self.segments) and self.segments[0] is segment

    def is_last(self, segment: Segment) -> bool:
        return bool(self.segments) and self.segments[-1] is segment

    def previous(self, segment: Segment) -> Segment | None:
        i = self.index_of(segment)
        return self.segments[i - 1] if i > 0 else None

    def next(self, segment: Segment) -> Segment | None:
        i = self.index_of(segment)
        return self.segments[i + 1] if i + 1 < len(self.segments) else None

    def nearest_point(self, target: Point, threshold: float) -> Point | None:
        """
        Closest anchor or absolute handle point to target, if nearer than threshold.
        Zero-length handles are skipped since they coincide with their anchor.
        """
        candidates: list[Point] = []
        for s in self.segments:
            if not s.handle_in.is_zero(): candidates.append(s.absolute(Part.HANDLE_IN))
            if not s.handle_out.is_zero(): candidates.append(s.absolute(Part.HANDLE_OUT))
            candidates.append(s.point)

        if not candidates: return None

        best = candidates[0]
        best_distance = best.distance_to(target)
        for p in candidates[1:]:
            d = p.distance_to(target)
            if d < best_distance:
                best = p
                best_distance = d

        return best if best_distance < threshold else None

    def hit_test(self, target: Point, tolerance: float) -> tuple[Segment, Part] | None:
        """Nearest anchor or non-zero handle within tolerance. Anchors win ties."""
        best: tuple[Segment, Part] | None = None
        best_distance = tolerance
        for s in self.segments:
            for part in (Part.ANCHOR, *enum.HANDLE_PARTS):
                if part is not Part.ANCHOR and s.handle(part).is_zero(): continue
                d = s.absolute(part).distance_to(target)
                if d <= best_distance and (best is None or d < best_distance):
                    best = (s, part)
                    best_distance = d
        return best

    def segment_ranges(self) -> list[Range]:
        """x-span of every joint, normalized by domain_size."""
        size = self.domain_size
        return [
            (a.point.x / size, b.point.x / size)
            for a, b in zip(self.segments, self.segments[1:])
        ]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_records(self) -> PathRecord:
        return {
            "domain_size": self.domain_size,
            "segments": [s.to_record() for s in self.segments],
        }

    @classmethod
    def from_records(cls, record: PathRecord) -> Self:
        path = cls(float(record["domain_size"]))
        for r in record["segments"]:
            path.append(Point(*r["point"]), Point(*r["handle_in"]), Point(*r["handle_out"]))
        return path

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_records())

    @classmethod
    def from_json(cls, data: bytes | str) -> Self:
        return cls.from_records(orjson.loads(data))

    def fingerprint(self) -> bytes:
        """Content snapshot compared before/after an interaction to detect changes."""
        return self.to_json()

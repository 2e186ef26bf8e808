"""
Sample compressor: bake a compiled curve into per-segment lookup tables.

Trades a one-time O(precision * segments) sampling cost for cheap queries:
a binary search over the segment ranges plus one linear interpolation.
"""

from __future__ import annotations
import bisect
from typing import Callable, Sequence

import numpy as np

from curve_fn import enums as enum
from curve_fn.types import Range
from curve_fn.utils import require_finite


class SampledFunction:
    """Lookup-table evaluator. Ranges are sorted, contiguous and in path order."""

    def __init__(self, ranges: Sequence[Range], samples: Sequence[np.ndarray]):
        if len(ranges) != len(samples):
            raise ValueError(
                f"SampledFunction: got {len(ranges)} ranges but {len(samples)} sample buffers"
            )
        if not ranges:
            raise ValueError("SampledFunction: at least one range is required")

        self.ranges: list[Range] = [(float(lo), float(hi)) for lo, hi in ranges]
        self.samples: list[np.ndarray] = [np.asarray(s, dtype=np.float64) for s in samples]
        self._starts = [lo for lo, _ in self.ranges]

    @property
    def precision(self) -> int:
        return len(self.samples[0])

    def lookup(self, x: float) -> float:
        require_finite("x", x)

        if x < self.ranges[0][0]:
            return float(self.samples[0][0])
        if x > self.ranges[-1][1]:
            return float(self.samples[-1][-1])

        i = max(bisect.bisect_right(self._starts, x) - 1, 0)
        lo, hi = self.ranges[i]
        buffer = self.samples[i]

        if hi == lo or x >= hi:
            return float(buffer[-1])

        position = (x - lo) / (hi - lo) * (len(buffer) - 1)
        floor = int(position)
        frac = position - floor
        if floor >= len(buffer) - 1:
            return float(buffer[-1])

        return float(buffer[floor] * (1.0 - frac) + buffer[floor + 1] * frac)

    __call__ = lookup


def compress(fn: Callable[[float], float], segment_ranges: Sequence[Range], precision: int) -> SampledFunction:
    """Evaluate fn at `precision` evenly spaced points inside every segment range."""
    if precision < enum.MIN_PRECISION:
        raise ValueError(f"Sample precision must be at least {enum.MIN_PRECISION}. Got: {precision}")
    if not segment_ranges:
        raise ValueError("compress: no segment ranges given")

    samples: list[np.ndarray] = []
    for lo, hi in segment_ranges:
        ts = np.linspace(lo, hi, precision)
        samples.append(np.fromiter((fn(float(t)) for t in ts), dtype=np.float64, count=precision))

    return SampledFunction(segment_ranges, samples)

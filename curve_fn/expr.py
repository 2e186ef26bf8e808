"""
Expression tree for compiled curves: one node per joint between two anchors.
All coordinates are normalized to the unit domain.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from curve_fn.bezier import Evaluator
from curve_fn.utils import remap


@dataclass(frozen=True, slots=True)
class Linear:
    x0: float
    y0: float
    x_end: float
    y_end: float
    slope: float

    def __call__(self, t: float) -> float:
        return self.slope * (t - self.x0) + self.y0


@dataclass(frozen=True, slots=True)
class Cubic:
    x0: float
    y0: float
    x_end: float
    y_end: float
    # handles remapped into the unit cell of this joint
    hx1: float
    hy1: float
    hx2: float
    hy2: float
    solver: Evaluator = field(repr=False, compare=False)

    def __call__(self, t: float) -> float:
        u = (t - self.x0) / (self.x_end - self.x0)
        return remap(self.solver(u), 0.0, 1.0, self.y0, self.y_end)


Node = Linear | Cubic

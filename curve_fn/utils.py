"""
Curve FN - Utilities Module

Small numeric helpers shared by the solver, compiler and editor.
"""

import math
import warnings

from curve_fn.types import Point


def warn(message: str, *, stacklevel: int = 3):
    warnings.warn("\u001B[33m\n" + message + "\u001B[0m", stacklevel=stacklevel)


def remap(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Linearly map value from [in_min, in_max] onto [out_min, out_max]."""
    if in_max - in_min == 0: return out_min
    return (value - in_min) * (out_max - out_min) / (in_max - in_min) + out_min


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def snap_to_grid(point: Point, domain_size: float, cells: int) -> Point:
    """Round point to the nearest of `cells` grid divisions spanning the domain."""
    if cells <= 0:
        raise ValueError(f"Grid cell count must be positive (>0). Got: {cells}")
    step = domain_size / cells
    return Point(round(point.x / step) * step, round(point.y / step) * step)


def intersect_vertical(a: Point, b: Point, x_limit: float) -> Point | None:
    """
    Intersection of segment a-b with the vertical line x = x_limit.
    None when the segment is vertical or does not reach the line.
    """
    dx = b.x - a.x
    if dx == 0: return None
    u = (x_limit - a.x) / dx
    if not 0.0 <= u <= 1.0: return None
    return Point(x_limit, a.y + (b.y - a.y) * u)


def require_finite(name: str, value: float) -> float:
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite. Got: {value}")
    return value


class IdGenerator:
    def __init__(self) -> None:
        self.counter = 0

    def __call__(self) -> int:
        self.counter += 1
        return self.counter

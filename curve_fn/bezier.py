"""
Cubic Bezier inverse solver: evaluate Y for a given X on a unit-cell curve.

The curve runs from (0, 0) to (1, 1) with control points (x1, y1) and (x2, y2).
Since the curve is parametrized by t, finding Y(x) takes two steps:
    1. invert X(t) = x for t (table bracket -> Newton-Raphson or bisection)
    2. evaluate Y(t)

Evaluators are cached by control points, so recompiling an unchanged segment
or sampling it many times reuses the same precomputed table.
"""

from __future__ import annotations
import functools
from typing import Callable

from curve_fn import enums as enum
from curve_fn.errors import InvalidControlPoints
from curve_fn.types import Point

Evaluator = Callable[[float], float]


# ============================================================================
# POLYNOMIAL COEFFICIENTS
# ============================================================================
#
# One axis of the unit-cell cubic, in Horner form:
#   B(t) = ((A*t + B)*t + C)*t
# with A = 1 - 3*a2 + 3*a1, B = 3*a2 - 6*a1, C = 3*a1
# ============================================================================

def _a(a1: float, a2: float) -> float: return 1.0 - 3.0 * a2 + 3.0 * a1
def _b(a1: float, a2: float) -> float: return 3.0 * a2 - 6.0 * a1
def _c(a1: float) -> float: return 3.0 * a1


def calc_bezier(t: float, a1: float, a2: float) -> float:
    return ((_a(a1, a2) * t + _b(a1, a2)) * t + _c(a1)) * t


def get_slope(t: float, a1: float, a2: float) -> float:
    return 3.0 * _a(a1, a2) * t * t + 2.0 * _b(a1, a2) * t + _c(a1)


def bezier_xy(t: float, p0: Point, p1: Point, p2: Point, p3: Point) -> Point:
    """Evaluate a full 2D cubic Bezier at parameter t."""
    s = 1.0 - t
    b0 = s**3
    b1 = 3 * s**2 * t
    b2 = 3 * s * t**2
    b3 = t**3
    return Point(
        b0 * p0.x + b1 * p1.x + b2 * p2.x + b3 * p3.x,
        b0 * p0.y + b1 * p1.y + b2 * p2.y + b3 * p3.y,
    )


# ============================================================================
# ROOT FINDING
# ============================================================================

def binary_subdivide(x: float, lower: float, upper: float, x1: float, x2: float) -> float:
    current_t = lower
    for _ in range(enum.SUBDIVISION_MAX_ITERATIONS):
        current_t = lower + (upper - lower) / 2.0
        current_x = calc_bezier(current_t, x1, x2) - x
        if current_x > 0.0:
            upper = current_t
        else:
            lower = current_t
        if abs(current_x) <= enum.SUBDIVISION_PRECISION:
            break
    return current_t


def newton_raphson_iterate(x: float, guess_t: float, x1: float, x2: float) -> float:
    for _ in range(enum.NEWTON_ITERATIONS):
        current_slope = get_slope(guess_t, x1, x2)
        if current_slope == 0.0:
            return guess_t
        current_x = calc_bezier(guess_t, x1, x2) - x
        guess_t -= current_x / current_slope
    return guess_t


def _sample_table(x1: float, x2: float) -> tuple[float, ...]:
    return tuple(calc_bezier(i * enum.SAMPLE_STEP_SIZE, x1, x2) for i in range(enum.SPLINE_TABLE_SIZE))


def _t_for_x(x: float, table: tuple[float, ...], x1: float, x2: float) -> float:
    interval_start = 0.0
    current = 1
    last = enum.SPLINE_TABLE_SIZE - 1

    while current != last and table[current] <= x:
        interval_start += enum.SAMPLE_STEP_SIZE
        current += 1
    current -= 1

    dist = (x - table[current]) / (table[current + 1] - table[current])
    guess_t = interval_start + dist * enum.SAMPLE_STEP_SIZE
    initial_slope = get_slope(guess_t, x1, x2)

    if initial_slope >= enum.NEWTON_MIN_SLOPE:
        return newton_raphson_iterate(x, guess_t, x1, x2)
    if initial_slope == 0.0:
        return guess_t
    return binary_subdivide(x, interval_start, interval_start + enum.SAMPLE_STEP_SIZE, x1, x2)


# ============================================================================
# PUBLIC API
# ============================================================================

def _identity(x: float) -> float:
    return x


@functools.lru_cache(maxsize=enum.SOLVER_CACHE_SIZE)
def solve(x1: float, y1: float, x2: float, y2: float) -> Evaluator:
    """
    Return an evaluator x -> y for the unit-cell cubic with controls (x1, y1), (x2, y2).

    Raises InvalidControlPoints unless 0 <= x1 <= 1 and 0 <= x2 <= 1.
    y values are unconstrained so curves may overshoot.
    """
    if not (0.0 <= x1 <= 1.0 and 0.0 <= x2 <= 1.0):
        raise InvalidControlPoints(
            f"Control point x values must be in range 0-1. Got: x1={x1}, x2={x2}"
        )

    if x1 == y1 and x2 == y2:
        return _identity

    table = _sample_table(x1, x2)

    def evaluate(x: float) -> float:
        if x == 0 or x == 1:
            return x
        return calc_bezier(_t_for_x(x, table, x1, x2), y1, y2)

    return evaluate

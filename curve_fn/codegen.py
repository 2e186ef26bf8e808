"""
Render compiled curves as Python source.

Two variants are produced from the same nodes:
    - typed:   annotated helpers and `def interpolate(t: float) -> float`
    - untyped: the same code without annotations
The Bezier solver helpers are emitted once, ahead of `interpolate`, and only
when at least one joint is cubic. Each cubic joint gets one solver built at
import time, so its lookup table is not rebuilt per call.
All-linear curves stay a plain if-chain.
"""

from __future__ import annotations
from string import Template
from typing import TYPE_CHECKING, Sequence

from curve_fn import enums as enum
from curve_fn.expr import Cubic, Linear, Node

if TYPE_CHECKING: from curve_fn.sampler import SampledFunction


# ============================================================================
# EMBEDDED SOLVER
# ============================================================================
#
# Mirrors curve_fn.bezier line for line so the exported source evaluates
# exactly like the in-process interpreter.
# ============================================================================

_BEZIER_TEMPLATE = Template('''\
SPLINE_TABLE_SIZE = ${table_size}
SAMPLE_STEP_SIZE = 1.0 / (SPLINE_TABLE_SIZE - 1)


def map_range(v${F}, in_min${F}, in_max${F}, out_min${F}, out_max${F})${R}:
    return (v - in_min) * (out_max - out_min) / (in_max - in_min) + out_min


def calc_bezier(t${F}, a1${F}, a2${F})${R}:
    return (((1.0 - 3.0 * a2 + 3.0 * a1) * t + (3.0 * a2 - 6.0 * a1)) * t + 3.0 * a1) * t


def get_slope(t${F}, a1${F}, a2${F})${R}:
    return 3.0 * (1.0 - 3.0 * a2 + 3.0 * a1) * t * t + 2.0 * (3.0 * a2 - 6.0 * a1) * t + 3.0 * a1


def bezier(x1${F}, y1${F}, x2${F}, y2${F})${C}:
    if not (0.0 <= x1 <= 1.0 and 0.0 <= x2 <= 1.0):
        raise ValueError(f"Control point x values must be in range 0-1. Got: x1={x1}, x2={x2}")
    if x1 == y1 and x2 == y2:
        return lambda x: x
    table${L} = [calc_bezier(i * SAMPLE_STEP_SIZE, x1, x2) for i in range(SPLINE_TABLE_SIZE)]

    def t_for_x(x${F})${R}:
        start = 0.0
        current = 1
        last = SPLINE_TABLE_SIZE - 1
        while current != last and table[current] <= x:
            start += SAMPLE_STEP_SIZE
            current += 1
        current -= 1
        dist = (x - table[current]) / (table[current + 1] - table[current])
        guess = start + dist * SAMPLE_STEP_SIZE
        slope = get_slope(guess, x1, x2)
        if slope >= ${min_slope}:
            for _ in range(${newton}):
                slope = get_slope(guess, x1, x2)
                if slope == 0.0:
                    return guess
                guess -= (calc_bezier(guess, x1, x2) - x) / slope
            return guess
        if slope == 0.0:
            return guess
        lower, upper = start, start + SAMPLE_STEP_SIZE
        for _ in range(${bisect}):
            guess = lower + (upper - lower) / 2.0
            delta = calc_bezier(guess, x1, x2) - x
            if delta > 0.0:
                upper = guess
            else:
                lower = guess
            if abs(delta) <= ${precision}:
                break
        return guess

    def evaluate(x${F})${R}:
        if x == 0 or x == 1:
            return x
        return calc_bezier(t_for_x(x), y1, y2)

    return evaluate
''')


def _annotations(typed: bool) -> dict[str, str]:
    if typed:
        return {"F": ": float", "R": " -> float", "L": ": list[float]",
                "C": ' -> "Callable[[float], float]"'}
    return {"F": "", "R": "", "L": "", "C": ""}


def bezier_source(typed: bool) -> str:
    return _BEZIER_TEMPLATE.substitute(
        _annotations(typed),
        table_size=enum.SPLINE_TABLE_SIZE,
        min_slope=enum.NEWTON_MIN_SLOPE,
        newton=enum.NEWTON_ITERATIONS,
        bisect=enum.SUBDIVISION_MAX_ITERATIONS,
        precision=enum.SUBDIVISION_PRECISION,
    )


# ============================================================================
# NODE RENDERING
# ============================================================================

def _num(value: float) -> str:
    return repr(float(value))


def _linear_expr(n: Linear) -> str:
    return (f"({_num(n.y_end)} - {_num(n.y0)}) / ({_num(n.x_end)} - {_num(n.x0)})"
            f" * (t - {_num(n.x0)}) + {_num(n.y0)}")


def _cubic_expr(n: Cubic, solver: str) -> str:
    u = f"(t - {_num(n.x0)}) / ({_num(n.x_end)} - {_num(n.x0)})"
    return f"map_range({solver}({u}), 0.0, 1.0, {_num(n.y0)}, {_num(n.y_end)})"


def _solver_call(n: Cubic) -> str:
    return f"bezier({_num(n.hx1)}, {_num(n.hy1)}, {_num(n.hx2)}, {_num(n.hy2)})"


def node_expr(node: Node, solver: str | None = None) -> str:
    """Return expression of one node. Cubic nodes call the named module-level solver."""
    if isinstance(node, Linear): return _linear_expr(node)
    if isinstance(node, Cubic): return _cubic_expr(node, solver or _solver_call(node))
    raise TypeError(f"Unknown node type: {type(node).__name__}")


def _signature(typed: bool) -> str:
    if typed: return f"def {enum.FUNCTION_NAME}(t: float) -> float:"
    return f"def {enum.FUNCTION_NAME}(t):"


def render_source(nodes: Sequence[Node], typed: bool) -> str:
    """
    Python source of the guarded if-chain for `nodes`.
    Each cubic joint's solver is built once at import as `_b<i>`.
    """
    if not nodes:
        raise ValueError("render_source: no nodes to render")

    lines: list[str] = []
    solvers: dict[int, str] = {}
    for i, node in enumerate(nodes):
        if isinstance(node, Cubic):
            solvers[i] = f"_b{len(solvers)}"

    if solvers:
        lines.append(bezier_source(typed))
        lines.append("")
        for i, name in solvers.items():
            lines.append(f"{name} = {_solver_call(nodes[i])}")
        lines.append("")
        lines.append("")

    lines.append(_signature(typed))
    last = len(nodes) - 1
    for i, node in enumerate(nodes):
        expr = node_expr(node, solvers.get(i))
        if i < last:
            lines.append(f"    if t < {_num(node.x_end)}:")
            lines.append(f"        return {expr}")
        else:
            lines.append(f"    return {expr}")
    return "\n".join(lines) + "\n"


def render_sampled_source(fn: SampledFunction, typed: bool) -> str:
    """Python source of a lookup-table evaluator with the samples inlined."""
    ranges = ", ".join(f"({_num(lo)}, {_num(hi)})" for lo, hi in fn.ranges)
    samples = ",\n    ".join("[" + ", ".join(_num(v) for v in s) + "]" for s in fn.samples)
    ranges_ann = ": list[tuple[float, float]]" if typed else ""
    samples_ann = ": list[list[float]]" if typed else ""

    return (
        f"RANGES{ranges_ann} = [{ranges}]\n"
        f"SAMPLES{samples_ann} = [\n    {samples},\n]\n"
        "\n\n"
        f"{_signature(typed)}\n"
        "    if t < RANGES[0][0]:\n"
        "        return SAMPLES[0][0]\n"
        "    if t > RANGES[-1][1]:\n"
        "        return SAMPLES[-1][-1]\n"
        "    i = 0\n"
        "    while i + 1 < len(RANGES) and RANGES[i + 1][0] <= t:\n"
        "        i += 1\n"
        "    lo, hi = RANGES[i]\n"
        "    s = SAMPLES[i]\n"
        "    if hi == lo or t >= hi:\n"
        "        return s[-1]\n"
        "    position = (t - lo) / (hi - lo) * (len(s) - 1)\n"
        "    floor = int(position)\n"
        "    frac = position - floor\n"
        "    if floor >= len(s) - 1:\n"
        "        return s[-1]\n"
        "    return s[floor] * (1.0 - frac) + s[floor + 1] * frac\n"
    )

"""
Path-to-function compiler.

SYSTEM OVERVIEW:
    1. Walk the anchors pairwise; each joint becomes one node of an expression tree
       - Linear: both adjoining handles are zero-length -> closed-form line
       - Cubic:  anything else -> unit-cell Bezier solved for y at x
    2. The node chain is interpreted directly: every node but the last is guarded
       by `t < node.x_end`, the last one is unconditional
    3. codegen renders the same nodes as typed and untyped Python source
    4. The result is validated by evaluating it across [0, 1] before it is accepted

Coordinates are normalized by the path's domain_size so the compiled function
always maps [0, 1] to the curve's normalized y.
"""

from __future__ import annotations
from dataclasses import dataclass
import math
import time
from typing import Callable, NamedTuple, Sequence

import numpy as np

from curve_fn import bezier, codegen, enums as enum, sampler
from curve_fn.errors import CompileValidationError, InvalidControlPoints
from curve_fn.expr import Cubic, Linear, Node
from curve_fn.path import Path, Segment
from curve_fn.utils import remap, require_finite


# ============================================================================
# TREE BUILDING
# ============================================================================

def _joint_to_node(a: Segment, b: Segment, size: float) -> Node:
    x0, y0 = a.point.x / size, a.point.y / size
    x1, y1 = b.point.x / size, b.point.y / size

    if x1 - x0 == 0:
        raise CompileValidationError(
            f"Zero-width joint between anchors {a.id} and {b.id} at x={x0}"
        )
    if x1 < x0:
        raise CompileValidationError(
            f"Anchors must be in ascending x order. Anchor {b.id} (x={x1}) follows anchor {a.id} (x={x0})"
        )

    if a.handle_out.is_zero() and b.handle_in.is_zero():
        return Linear(x0, y0, x1, y1, (y1 - y0) / (x1 - x0))

    h0 = a.absolute(enum.Part.HANDLE_OUT)
    h1 = b.absolute(enum.Part.HANDLE_IN)

    # y is mapped without clamping: handles overshooting the joint extrapolate
    hx1 = remap(h0.x / size, x0, x1, 0.0, 1.0)
    hy1 = remap(h0.y / size, y0, y1, 0.0, 1.0)
    hx2 = remap(h1.x / size, x0, x1, 0.0, 1.0)
    hy2 = remap(h1.y / size, y0, y1, 0.0, 1.0)

    try:
        solver = bezier.solve(hx1, hy1, hx2, hy2)
    except InvalidControlPoints as e:
        raise CompileValidationError(
            f"Joint between anchors {a.id} and {b.id} has handles outside its x-span: {e}"
        ) from e

    return Cubic(x0, y0, x1, y1, hx1, hy1, hx2, hy2, solver)


def build_nodes(path: Path) -> list[Node]:
    if len(path) < 2:
        raise CompileValidationError(f"Path needs at least two anchors. Got: {len(path)}")
    size = path.domain_size
    return [_joint_to_node(a, b, size) for a, b in zip(path.segments, path.segments[1:])]


# ============================================================================
# INTERPRETER
# ============================================================================

class CompiledCurve:
    """Executable form of a path: a linear scan over guarded nodes."""

    def __init__(self, nodes: Sequence[Node]):
        if not nodes:
            raise ValueError("CompiledCurve requires at least one node")
        self.nodes: tuple[Node, ...] = tuple(nodes)

    def __call__(self, t: float) -> float:
        require_finite("t", t)
        for node in self.nodes[:-1]:
            if t < node.x_end:
                return node(t)
        return self.nodes[-1](t)

    @property
    def has_cubic(self) -> bool:
        return any(isinstance(n, Cubic) for n in self.nodes)


def validate(fn: Callable[[float], float]) -> None:
    """Evaluate at the edges and a fixed sweep; any failure aborts the compile."""
    steps = round(1.0 / enum.VALIDATION_STEP)
    sweep = [0.0, 1.0, *(float(t) for t in np.linspace(0.0, 1.0, steps + 1))]

    for t in sweep:
        try:
            y = fn(t)
        except Exception as e:
            raise CompileValidationError(f"Function has errors at t={t}: {e!r}") from e
        if not math.isfinite(y):
            raise CompileValidationError(f"Function is not finite at t={t}. Got: {y}")


def compile_path(path: Path) -> CompiledCurve:
    curve = CompiledCurve(build_nodes(path))
    validate(curve)
    return curve


# ============================================================================
# LIBRARY ENTRY POINT
# ============================================================================

class CompileOptions(NamedTuple):
    use_sampling: bool = False
    emit_typed_source: bool = True
    precision: int = enum.DEFAULT_PRECISION


@dataclass(frozen=True, slots=True)
class CompiledResult:
    fn: Callable[[float], float]
    typed_source: str | None
    untyped_source: str
    sampled: bool
    precision: int
    has_error: bool = False
    compile_duration_ms: float = 0.0


def compile_path_to_function(path: Path, options: CompileOptions = CompileOptions()) -> CompiledResult:
    """
    Compile path into an evaluator plus its source text.
    Raises CompileValidationError; EditorState.recompile absorbs it.
    """
    start = time.perf_counter()

    curve = compile_path(path)

    if options.use_sampling:
        fn = sampler.compress(curve, path.segment_ranges(), options.precision)
        untyped = codegen.render_sampled_source(fn, typed=False)
        typed = codegen.render_sampled_source(fn, typed=True) if options.emit_typed_source else None
    else:
        fn = curve
        untyped = codegen.render_source(curve.nodes, typed=False)
        typed = codegen.render_source(curve.nodes, typed=True) if options.emit_typed_source else None

    return CompiledResult(
        fn=fn,
        typed_source=typed,
        untyped_source=untyped,
        sampled=options.use_sampling,
        precision=options.precision,
        has_error=False,
        compile_duration_ms=(time.perf_counter() - start) * 1000.0,
    )

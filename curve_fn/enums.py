"""
Curve FN - Enums and Constants Module

All tunables, part identifiers and modifier flags.
Central location for magic numbers with type safety and IDE autocomplete.
"""

from enum import Enum, IntFlag
from typing import Final


# ============================================================================
# SELECTABLE PARTS
# ============================================================================

class Part(Enum):
    """Which piece of a segment a selection entry refers to"""
    ANCHOR = "segment"
    HANDLE_IN = "handle-in"
    HANDLE_OUT = "handle-out"

HANDLE_PARTS: Final = (Part.HANDLE_IN, Part.HANDLE_OUT)


def opposite(side: Part) -> Part:
    if side is Part.HANDLE_IN: return Part.HANDLE_OUT
    if side is Part.HANDLE_OUT: return Part.HANDLE_IN
    raise ValueError(f"Only handles have an opposite side. Got: {side}")


# ============================================================================
# MODIFIER KEYS
# ============================================================================

class Modifier(IntFlag):
    """Modifier keys held during a pointer event"""
    NONE = 0
    ADD = 1         # shift: grow/toggle the selection
    EXCLUSIVE = 2   # alt: grab a single item, mirror handles, smooth/insert
    SNAP = 4        # control: snap to the grid


# ============================================================================
# BEZIER SOLVER
# ============================================================================

SPLINE_TABLE_SIZE: Final = 11
SAMPLE_STEP_SIZE: Final = 1.0 / (SPLINE_TABLE_SIZE - 1)

NEWTON_ITERATIONS: Final = 4
NEWTON_MIN_SLOPE: Final = 0.001
SUBDIVISION_PRECISION: Final = 0.0000001
SUBDIVISION_MAX_ITERATIONS: Final = 10

SOLVER_CACHE_SIZE: Final = 1024


# ============================================================================
# EDITOR
# ============================================================================

DEBOUNCE_MS: Final = 300
"""Press/click on the same item within this window counts as one gesture"""

CLICK_MAX_DISTANCE: Final = 0.0075
"""Pointer travel below which a release is still a click, as fraction of domain"""

HIT_TOLERANCE: Final = 0.02
"""Default hit-test radius, as a fraction of the domain size"""

GRID_CELLS: Final = 16
"""Grid divisions across the domain used when snapping"""

SMOOTH_HANDLE_FRACTION: Final = 0.1
"""Length of a boundary anchor's handle when smoothing, as fraction of domain"""


# ============================================================================
# COMPILER / SAMPLER
# ============================================================================

VALIDATION_STEP: Final = 0.01
DEFAULT_PRECISION: Final = 100
MIN_PRECISION: Final = 2

FUNCTION_NAME: Final = "interpolate"

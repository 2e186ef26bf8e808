"""
Curve FN - Interaction Engine

Turns pointer events into Path and SelectionSet mutations.

EVENT FLOW:
    press   -> hit-test, update selection, freeze selected items (drag origin)
    drag    -> transform_selected: frozen point + (pointer - press point)
    release -> is_click ? on_click : nothing, then settle (recompile if changed)

All handlers take the EditorState explicitly. Nothing here touches the
compiled-function cache except through recompile/settle.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import NamedTuple

from curve_fn import enums as enum
from curve_fn.compiler import CompileOptions, CompiledResult, compile_path_to_function
from curve_fn.enums import Modifier, Part
from curve_fn.errors import CompileValidationError
from curve_fn.path import Path, Segment
from curve_fn.selection import ItemKey, SelectionSet
from curve_fn.types import ZERO, Milliseconds, Point
from curve_fn.utils import clamp, intersect_vertical, snap_to_grid, warn


class PointerEvent(NamedTuple):
    point: Point
    timestamp: Milliseconds
    modifiers: Modifier = Modifier.NONE


@dataclass
class EditorState:
    path: Path = field(default_factory=Path.linear)
    selection: SelectionSet = field(default_factory=SelectionSet)
    tolerance: float | None = None
    last_press: PointerEvent | None = None
    compiled: CompiledResult | None = None
    compiled_fingerprint: bytes | None = None
    compiled_options: CompileOptions | None = None
    has_error: bool = False

    def __post_init__(self) -> None:
        if self.tolerance is None:
            self.tolerance = enum.HIT_TOLERANCE * self.path.domain_size

    @property
    def domain_size(self) -> float:
        return self.path.domain_size


# ============================================================================
# SELECTION PROTOCOL
# ============================================================================

def _hit_key(state: EditorState, point: Point) -> ItemKey | None:
    hit = state.path.hit_test(point, state.tolerance)
    if hit is None: return None
    segment, part = hit
    return ItemKey(segment.id, part)


def on_press(state: EditorState, event: PointerEvent) -> ItemKey | None:
    """Update the selection for a pointer press and freeze it as the drag origin."""
    key = _hit_key(state, event.point)
    mods = event.modifiers
    selection = state.selection

    if key is None:
        if not mods & (Modifier.ADD | Modifier.EXCLUSIVE):
            selection.clear()
    elif mods & Modifier.EXCLUSIVE:
        if key not in selection:
            selection.select_only(key, event.timestamp)
    elif mods & Modifier.ADD:
        selection.add(key, event.timestamp)
    else:
        selection.select_only(key, event.timestamp)

    state.last_press = event
    selection.freeze(state.path)
    return key


def is_click(state: EditorState, event: PointerEvent) -> bool:
    """A release shortly after and close to the last press is a click, not a drag."""
    press = state.last_press
    if press is None: return False
    elapsed = event.timestamp - press.timestamp
    travelled = event.point.distance_to(press.point)
    return elapsed < enum.DEBOUNCE_MS and travelled < enum.CLICK_MAX_DISTANCE * state.domain_size


def on_click(state: EditorState, event: PointerEvent) -> bool:
    """
    Handle a click that followed a press. Returns True if the path was edited.

    ADD toggles the hit item, unless the preceding press just added it.
    EXCLUSIVE smooths/flattens the selected anchors, or inserts an anchor
    when clicking empty space with nothing selected.
    """
    key = _hit_key(state, event.point)
    mods = event.modifiers

    if mods & Modifier.ADD and key is not None:
        if not state.selection.recently_added(key, event.timestamp):
            state.selection.toggle(key, event.timestamp)
        return False

    if mods & Modifier.EXCLUSIVE:
        if len(state.selection):
            return toggle_smoothing(state)
        if key is None:
            insert_point(state, event.point, event.timestamp)
            return True

    return False


def insert_point(state: EditorState, point: Point, timestamp: Milliseconds) -> Segment:
    """Insert an anchor at point (x clamped into the domain) and select only it."""
    size = state.domain_size
    segment = state.path.insert(Point(clamp(point.x, 0.0, size), point.y))
    state.selection.select_only(ItemKey(segment.id, Part.ANCHOR), timestamp)
    return segment


# ============================================================================
# HANDLE CONSTRAINTS
# ============================================================================

def clamp_handle(segment: Segment, side: Part, target: Point, domain_size: float) -> Point:
    """
    Relative handle offset for an absolute target, keeping x inside [0, domain_size].

    An out-of-range target is pulled back along the anchor->target line to the
    exceeded boundary. Without an intersection the current handle is kept.
    """
    if 0.0 <= target.x <= domain_size:
        return target - segment.point

    x_limit = domain_size if target.x > domain_size else 0.0
    hit = intersect_vertical(segment.point, target, x_limit)
    if hit is None:
        return segment.handle(side)

    hit = Point(clamp(hit.x, 0.0, domain_size), hit.y)
    return hit - segment.point


def mirror_handle(segment: Segment, leader: Part, domain_size: float) -> None:
    """Set the opposite handle to the negated leader, subject to clamping."""
    follower = enum.opposite(leader)
    target = segment.point + (-segment.handle(leader))
    segment.set_handle(follower, clamp_handle(segment, follower, target, domain_size))


# ============================================================================
# DRAGGING
# ============================================================================

def transform_selected(state: EditorState, event: PointerEvent) -> None:
    """
    Move every selected item to its frozen point plus the pointer delta since
    the last press. Replaying any prefix of a drag gives the same end state.

    Anchors move first so handles are made relative to their anchor's final
    position, whatever the selection order.
    """
    if not len(state.selection): return

    origin = state.last_press.point if state.last_press is not None else ZERO
    delta = event.point - origin
    snap = bool(event.modifiers & Modifier.SNAP)
    mirror = bool(event.modifiers & Modifier.EXCLUSIVE)

    size = state.domain_size
    path = state.path

    moves: list[tuple[Segment, Part, Point]] = []
    for item in state.selection:
        if item.frozen_point is None: continue
        segment = path.get(item.segment_id)
        if segment is None: continue

        new_point = item.frozen_point + delta
        if snap:
            new_point = snap_to_grid(new_point, size, enum.GRID_CELLS)
        moves.append((segment, item.part, new_point))

    for segment, part, new_point in moves:
        if part is not Part.ANCHOR: continue
        if path.is_first(segment):
            x = 0.0
        elif path.is_last(segment):
            x = size
        else:
            x = clamp(new_point.x, 0.0, size)
        segment.point = Point(x, new_point.y)

    for segment, part, new_point in moves:
        if part is Part.ANCHOR: continue
        segment.set_handle(part, clamp_handle(segment, part, new_point, size))
        if mirror:
            mirror_handle(segment, part, size)


def on_drag(state: EditorState, event: PointerEvent) -> None:
    transform_selected(state, event)


# ============================================================================
# EDIT COMMANDS
# ============================================================================

def _smooth_interior(path: Path, segment: Segment) -> None:
    prev, nxt = path.previous(segment), path.next(segment)
    span = nxt.point.x - prev.point.x
    if span <= 0:
        return
    reach = min(segment.point.x - prev.point.x, nxt.point.x - segment.point.x) / 3.0
    tangent = (nxt.point - prev.point) * (reach / span)
    segment.handle_in = -tangent
    segment.handle_out = tangent


def toggle_smoothing(state: EditorState) -> bool:
    """
    Smooth the selected anchors if all of them are linear, otherwise flatten them.
    Returns True if any anchor was selected.
    """
    path = state.path
    anchors = [
        s for s in (path.get(item.segment_id) for item in state.selection.of_part(Part.ANCHOR))
        if s is not None
    ]
    if not anchors: return False

    if all(s.is_linear() for s in anchors):
        length = enum.SMOOTH_HANDLE_FRACTION * state.domain_size
        for s in anchors:
            if path.is_first(s):
                if len(path) > 1:
                    s.handle_out = (path.next(s).point - s.point).with_length(length)
            elif path.is_last(s):
                s.handle_in = (path.previous(s).point - s.point).with_length(length)
            else:
                _smooth_interior(path, s)
    else:
        for s in anchors:
            s.make_linear()
            state.selection.remove(ItemKey(s.id, Part.HANDLE_IN))
            state.selection.remove(ItemKey(s.id, Part.HANDLE_OUT))

    return True


def delete_selected(state: EditorState) -> int:
    """Remove every selected interior anchor. Returns how many were removed."""
    removed = 0
    for item in state.selection.of_part(Part.ANCHOR):
        segment = state.path.get(item.segment_id)
        if segment is None: continue
        if state.path.remove(segment):
            state.selection.remove_segment(segment.id)
            removed += 1
    return removed


# ============================================================================
# COMPILE CACHE
# ============================================================================

def recompile(state: EditorState, options: CompileOptions = CompileOptions()) -> CompiledResult | None:
    """
    Compile the current path into the cache.
    A failed compile keeps the previous result and raises the error flag.
    """
    state.compiled_fingerprint = state.path.fingerprint()
    state.compiled_options = options
    try:
        result = compile_path_to_function(state.path, options)
    except CompileValidationError as e:
        warn(f"Curve could not be compiled, keeping the previous function: {e}")
        state.has_error = True
        if state.compiled is not None:
            state.compiled = replace(state.compiled, has_error=True)
        return state.compiled

    state.compiled = result
    state.has_error = False
    return result


def settle(state: EditorState, options: CompileOptions = CompileOptions()) -> bool:
    """End of an interaction. Recompiles only if the path or options changed; returns whether it did."""
    state.selection.unfreeze()
    if state.compiled_options == options and state.path.fingerprint() == state.compiled_fingerprint:
        return False
    recompile(state, options)
    return True


def on_release(state: EditorState, event: PointerEvent, options: CompileOptions = CompileOptions()) -> bool:
    if is_click(state, event):
        on_click(state, event)
    return settle(state, options)

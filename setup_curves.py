#!/usr/bin/env python3
"""
Register and compile a set of common easing curves.

Each preset is built as an editable Path, compiled, and its typed source printed.
Copy the printed `interpolate` functions wherever a fixed easing is needed.
"""

import time

from curve_fn.compiler import CompileOptions, CompiledResult, compile_path_to_function
from curve_fn.path import Path
from curve_fn.types import Point

presets: dict[str, Path] = {}


def register_preset(name: str, handle_out: tuple[float, float], handle_in: tuple[float, float]) -> Path:
    """
    Two-anchor preset from (0, 0) to (1, 1).
    handle_out belongs to the start anchor, handle_in to the end anchor (both relative).
    """
    if name in presets:
        raise ValueError(f"Preset '{name}' is already registered")
    path = Path(1.0)
    path.append(Point(0.0, 0.0), handle_out=Point(*handle_out))
    path.append(Point(1.0, 1.0), handle_in=Point(*handle_in))
    presets[name] = path
    return path


def register_common_curves():
    print("="*80)
    print("REGISTERING COMMON CURVES")
    print("="*80)

    register_preset("linear", handle_out=(0.0, 0.0), handle_in=(0.0, 0.0))

    # Standard CSS-like easings
    register_preset("ease_in", handle_out=(0.42, 0.0), handle_in=(0.0, 0.0))
    register_preset("ease_out", handle_out=(0.0, 0.0), handle_in=(-0.42, 0.0))
    register_preset("ease_in_out", handle_out=(0.42, 0.0), handle_in=(-0.42, 0.0))

    # Shoots past 1 before settling
    register_preset("overshoot", handle_out=(0.3, 0.6), handle_in=(-0.3, 0.4))

    print(f"Registered {len(presets)} presets: {', '.join(presets)}")


def compile_presets(options: CompileOptions = CompileOptions()) -> dict[str, CompiledResult]:
    results: dict[str, CompiledResult] = {}
    for name, path in presets.items():
        result = compile_path_to_function(path, options)
        results[name] = result
        print(f"\n# {name}  ({result.compile_duration_ms:.2f} ms, f(0.5) = {result.fn(0.5):.4f})")
        print(result.typed_source or result.untyped_source)
    return results


if __name__ == "__main__":
    start_time = time.time()
    register_common_curves()
    compile_presets()
    print("="*80)
    print(f"COMPILATION COMPLETE in {time.time() - start_time:.2f}s")

"""
Curve FN - Errors

Named failures raised by the solver, path model and compiler.
They subclass the built-in types so callers can keep catching ValueError/RuntimeError.
"""


class InvalidControlPoints(ValueError):
    """Bezier handle x outside [0, 1]. Handles should be domain-clamped upstream."""


class EmptyPathError(ValueError):
    """Point insertion attempted on a path without segments."""


class CompileValidationError(RuntimeError):
    """Compiled function failed its post-compile evaluation sweep."""

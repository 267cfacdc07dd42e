"""Exception types raised by the renderer.

Every error here is fatal: rendering is a pure computation, so there is no
retry path. Configuration problems are detected once before the frame loop
starts, and degenerate geometry is rejected while the scene is being built.
"""


class AOBenchError(Exception):
    """Base class for all renderer errors."""


class InvalidConfigurationError(AOBenchError, ValueError):
    """Raised when render settings fail validation.

    The message names the check that failed, e.g. ``"width must be positive"``.
    """


class DegenerateGeometryError(AOBenchError, ValueError):
    """Raised for geometry that would produce NaN or garbage pixels.

    Examples are normalizing a zero-length vector, a sphere with a
    non-positive radius, or a plane whose normal has zero length.
    """

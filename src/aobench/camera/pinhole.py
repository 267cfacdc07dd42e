"""Pinhole camera model for primary ray generation.

The camera is positioned with look-at parameters (lookfrom, lookat, vup) and
a vertical field of view. From these it builds an orthonormal basis (u, v, w):
- w: points from lookat toward lookfrom (opposite the view direction)
- u: points right in the image plane
- v: points up in the image plane

The basis and the viewport geometry are computed once on the host with NumPy
and stored in Taichi fields that the render kernels read.

Pixel (i, j) with sub-pixel offset (du, dv) in [0, 1) maps to the image-plane
coordinates

    u = (i + du) / width
    v = 1 - (j + dv) / height

so row 0 is the top of the image. The benchmark camera (origin at the world
origin, looking down -z, 90 degree field of view) reproduces the classic
direction normalize(2u - 1, 2v - 1, -1).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aobench.camera.pinhole import PinholeCamera, setup_camera, get_pixel_ray
    >>>
    >>> camera = PinholeCamera(
    ...     lookfrom=(0.0, 0.0, 0.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=90.0,
    ...     aspect_ratio=1.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_pixel_ray(0, 0, 0.5, 0.5, 256, 256)  # Top-left pixel center
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from aobench.core.ray import Ray, Vec3Tuple, make_ray, vec3
from aobench.errors import DegenerateGeometryError, InvalidConfigurationError

logger = logging.getLogger(__name__)

# Basis vectors shorter than this mean the view parameters are degenerate
_BASIS_EPSILON = 1e-8

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
    """

    lookfrom: Vec3Tuple = (0.0, 0.0, 0.0)
    lookat: Vec3Tuple = (0.0, 0.0, -1.0)
    vup: Vec3Tuple = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 1.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward

# Viewport vectors for ray computation
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (host side)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Validate the camera and write its state into the Taichi fields.

    The viewport is a virtual image plane at unit distance in front of the
    camera, 2 * tan(vfov / 2) units tall.

    Args:
        camera: Camera configuration with position, orientation, and FOV.

    Raises:
        InvalidConfigurationError: If vfov is outside (0, 180) or the
            aspect ratio is not positive.
        DegenerateGeometryError: If lookfrom equals lookat, or vup is
            parallel to the view direction.
    """
    if not 0.0 < camera.vfov < 180.0:
        raise InvalidConfigurationError(f"vfov must be in (0, 180) degrees, got {camera.vfov}")
    if not math.isfinite(camera.aspect_ratio) or camera.aspect_ratio <= 0.0:
        raise InvalidConfigurationError(
            f"aspect_ratio must be positive, got {camera.aspect_ratio}"
        )

    theta = math.radians(camera.vfov)
    viewport_height = 2.0 * math.tan(theta / 2.0)
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w_len = np.linalg.norm(w)
    if not np.isfinite(w_len) or w_len < _BASIS_EPSILON:
        raise DegenerateGeometryError(
            f"Camera lookfrom and lookat coincide: {tuple(camera.lookfrom)}"
        )
    w = w / w_len

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u_len = np.linalg.norm(u)
    if not np.isfinite(u_len) or u_len < _BASIS_EPSILON:
        raise DegenerateGeometryError(
            f"Camera vup {tuple(camera.vup)} is parallel to the view direction"
        )
    u = u / u_len

    v = np.cross(w, u)

    horizontal = viewport_width * u
    vertical = viewport_height * v
    lower_left = lookfrom - w - horizontal / 2.0 - vertical / 2.0

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()

    logger.debug(
        f"Camera at {tuple(camera.lookfrom)} looking at {tuple(camera.lookat)}, "
        f"vfov={camera.vfov} aspect={camera.aspect_ratio:.4f}"
    )


# =============================================================================
# Ray Generation (Taichi functions)
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the camera origin with a unit-length direction.
    """
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    origin = _camera_origin[None]
    direction = tm.normalize(point_on_viewport - origin)
    return make_ray(origin, direction)


@ti.func
def get_pixel_ray(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    offset_u: ti.f32,
    offset_v: ti.f32,
    width: ti.i32,
    height: ti.i32,
) -> Ray:
    """Generate the primary ray through a sub-pixel position.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        offset_u: Horizontal offset inside the pixel, in [0, 1).
        offset_v: Vertical offset inside the pixel, in [0, 1), growing
            downward like the row index.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The primary ray for that sub-pixel position.
    """
    u = (ti.cast(pixel_i, ti.f32) + offset_u) / ti.cast(width, ti.f32)
    v = 1.0 - (ti.cast(pixel_j, ti.f32) + offset_v) / ti.cast(height, ti.f32)
    return get_ray(u, v)


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera position in world space."""
    return _camera_origin[None]


@ti.func
def get_camera_basis():
    """Get the camera's orthonormal basis vectors.

    Returns:
        A tuple (u, v, w): right, up, and backward directions.
    """
    return _camera_u[None], _camera_v[None], _camera_w[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, Vec3Tuple]:
    """Get the current camera state as host tuples, for debugging and tests.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
    """
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, fld in fields.items():
        value = fld[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info

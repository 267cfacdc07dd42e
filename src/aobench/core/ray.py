"""Ray data structure and vector utilities for ambient occlusion rendering.

This module provides the Ray dataclass, the vector operations used by every
other component, and the hemisphere helpers the AO shader builds on. Device
functions are Taichi functions for use inside kernels; the ``vec_*`` helpers
operate on plain tuples on the host side (scene construction, validation).

Vectors are values: every operation returns a new vector and never mutates
its arguments.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import math

import taichi as ti
import taichi.math as tm

from aobench.errors import DegenerateGeometryError

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Host-side vector type
Vec3Tuple = tuple[float, float, float]

# Vectors shorter than this are treated as zero by normalize
NORMALIZE_EPSILON = 1e-9

# Components of a normal inside (-ONB_THRESHOLD, ONB_THRESHOLD) are "small"
# enough for the matching world axis to serve as the basis reference vector
ONB_THRESHOLD = 0.6


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Primary and occlusion
            rays are always built with a unit-length direction.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def add(a: vec3, b: vec3) -> vec3:
    """Component-wise sum a + b."""
    return a + b


@ti.func
def sub(a: vec3, b: vec3) -> vec3:
    """Component-wise difference a - b."""
    return a - b


@ti.func
def scale(v: vec3, k: ti.f32) -> vec3:
    """Scale a vector by a scalar."""
    return v * k


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Kernels cannot raise, so a zero-length input (shorter than
    NORMALIZE_EPSILON) yields the zero vector instead of NaNs. Surface
    normals and ray directions are constructed so this never happens.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or the zero vector.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_sq = tm.dot(v, v)
    if len_sq > NORMALIZE_EPSILON * NORMALIZE_EPSILON:
        result = v / ti.sqrt(len_sq)
    return result


# =============================================================================
# Hemisphere Sampling Helpers
# =============================================================================


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis from a normal vector.

    The reference vector is the first world axis along which the normal has
    a small component, which keeps it far from parallel to the normal:

        |n.x| < 0.6 -> x axis, else |n.y| < 0.6 -> y axis, else z axis

    Then tangent = normalize(ref x n) and bitangent = normalize(n x tangent).

    Args:
        normal: The surface normal (unit length).

    Returns:
        A tuple (tangent, bitangent, normal) forming a right-handed
        orthonormal basis with the normal as the local z-axis.
    """
    ref = vec3(1.0, 0.0, 0.0)
    if -ONB_THRESHOLD < normal.x < ONB_THRESHOLD:
        ref = vec3(1.0, 0.0, 0.0)
    elif -ONB_THRESHOLD < normal.y < ONB_THRESHOLD:
        ref = vec3(0.0, 1.0, 0.0)
    elif -ONB_THRESHOLD < normal.z < ONB_THRESHOLD:
        ref = vec3(0.0, 0.0, 1.0)
    tangent = normalize(tm.cross(ref, normal))
    bitangent = normalize(tm.cross(normal, tangent))
    return tangent, bitangent, normal


@ti.func
def local_to_world(local_dir: vec3, tangent: vec3, bitangent: vec3, normal: vec3) -> vec3:
    """Transform a direction from local (z-up) to world coordinates."""
    return local_dir.x * tangent + local_dir.y * bitangent + local_dir.z * normal


@ti.func
def cosine_direction(u1: ti.f32, u2: ti.f32) -> vec3:
    """Map two uniforms to a cosine-weighted direction (Malley's method).

    A point is drawn uniformly on the unit disk (radius sqrt(u1), angle
    2*pi*u2) and projected up onto the hemisphere. The resulting directions
    have PDF cos(theta) / pi about the local z-axis.

    Args:
        u1: Uniform sample in [0, 1); controls the disk radius.
        u2: Uniform sample in [0, 1); controls the azimuth.

    Returns:
        A unit direction in the local frame with z >= 0.
    """
    r = ti.sqrt(u1)
    phi = 2.0 * tm.pi * u2
    z = ti.sqrt(ti.max(0.0, 1.0 - u1))
    return vec3(ti.cos(phi) * r, ti.sin(phi) * r, z)


# =============================================================================
# Host-side Tuple Helpers
# =============================================================================


def vec_add(a: Vec3Tuple, b: Vec3Tuple) -> Vec3Tuple:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def vec_sub(a: Vec3Tuple, b: Vec3Tuple) -> Vec3Tuple:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vec_scale(v: Vec3Tuple, k: float) -> Vec3Tuple:
    return (v[0] * k, v[1] * k, v[2] * k)


def vec_dot(a: Vec3Tuple, b: Vec3Tuple) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def vec_cross(a: Vec3Tuple, b: Vec3Tuple) -> Vec3Tuple:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def vec_length(v: Vec3Tuple) -> float:
    return math.sqrt(vec_dot(v, v))


def vec_normalize(v: Vec3Tuple) -> Vec3Tuple:
    """Normalize a host-side vector.

    Unlike the device normalize(), this fails loudly: it is used while
    building the scene, where a zero-length vector is a programming error.

    Raises:
        DegenerateGeometryError: If v is (near) zero length or not finite.
    """
    n = vec_length(v)
    if not math.isfinite(n) or n <= NORMALIZE_EPSILON:
        raise DegenerateGeometryError(f"Cannot normalize degenerate vector {tuple(v)}")
    return (v[0] / n, v[1] / n, v[2] / n)

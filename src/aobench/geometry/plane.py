"""Infinite plane primitive with ray-plane intersection.

A plane is defined by any point on it and its unit normal. The benchmark
uses a single plane as the ground the spheres rest on.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aobench.geometry.plane import Plane, hit_plane
    >>> # Ground plane at y = -0.5 facing up
    >>> ground = Plane(
    ...     point=ti.math.vec3(0.0, -0.5, 0.0),
    ...     normal=ti.math.vec3(0.0, 1.0, 0.0),
    ... )
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Rays whose direction is this close to perpendicular to the normal are
# treated as parallel to the plane
PARALLEL_EPSILON = 1e-9


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point on the plane (vec3).
        normal: The unit normal of the plane (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-plane intersection.

    Solves dot(normal, origin + t * direction - point) = 0:

        t = dot(normal, point - origin) / dot(normal, direction)

    A near-zero denominator (ray parallel to the plane) is a miss, as is a
    t outside (t_min, t_max). The hit normal is the plane's own normal
    regardless of which side the ray arrives from.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        plane: The plane to test intersection against.
        t_min: Hits at or before this distance are rejected.
        t_max: Hits at or beyond this distance are rejected.

    Returns:
        A HitRecord; check its hit field.
    """
    denom = tm.dot(plane.normal, ray_direction)

    result = make_miss_record()

    if ti.abs(denom) >= PARALLEL_EPSILON:
        t = tm.dot(plane.normal, plane.point - ray_origin) / denom
        if t > t_min and t < t_max:
            result = HitRecord(
                hit=1,
                t=t,
                point=ray_origin + t * ray_direction,
                normal=plane.normal,
            )

    return result


@ti.func
def make_plane(point: vec3, normal: vec3) -> Plane:
    """Create a plane from a point on it and its unit normal."""
    return Plane(point=point, normal=normal)

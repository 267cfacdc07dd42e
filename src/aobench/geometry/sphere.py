"""Sphere primitive with robust ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord shared by all
primitives, and the intersection function. Intersection uses the robust
quadratic formula from Ray Tracing Gems to avoid catastrophic cancellation
when b^2 is nearly equal to 4ac.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aobench.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Produced transiently by every intersection test; never stored.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: Distance along the ray to the hit. Only valid if hit == 1.
        point: The 3D point where the ray hit the surface.
            Only valid if hit == 1.
        normal: The unit surface normal at the hit point. For spheres this
            always points away from the center. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve quadratic equation using robust formula from Ray Tracing Gems.

    Solves a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Tangent ray through the center plane; the plain formula is exact here
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Substituting the ray into |P - C|^2 = r^2 gives a*t^2 + 2*h*t + c = 0 with

        oc = origin - center
        a  = dot(direction, direction)
        h  = dot(direction, oc)        (half of the traditional b)
        c  = dot(oc, oc) - r^2

    A negative discriminant h^2 - a*c means no hit. Otherwise the nearer root
    inside (t_min, t_max) wins, falling back to the farther root when the
    ray starts inside the sphere. t_min keeps rays leaving a surface from
    hitting that same surface again.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        sphere: The sphere to test intersection against.
        t_min: Hits at or before this distance are rejected.
        t_max: Hits at or beyond this distance are rejected.

    Returns:
        A HitRecord; check its hit field.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    # Taichi requires outer-scope declaration
    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            hit_point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=hit_point,
                normal=(hit_point - sphere.center) / sphere.radius,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)

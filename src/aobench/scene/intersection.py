"""Scene-level primitive intersection testing.

This module stores the scene's primitives in Taichi fields and provides the
brute-force nearest-hit query used for both primary and occlusion rays. The
scene is tiny (the benchmark has three spheres and one plane), so there is no
acceleration structure: every ray is tested against every primitive.

Primitives form a tagged variant: the hit record carries a PrimitiveKind and
the index of the primitive within its kind's storage.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aobench.scene.intersection import (
    ...     add_plane, add_sphere, clear_scene, intersect_scene, vec3
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5)
    >>> add_plane(vec3(0, -0.5, 0), vec3(0, 1, 0))
    >>> # Use intersect_scene within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from aobench.geometry.plane import Plane, hit_plane
from aobench.geometry.sphere import HitRecord, Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class PrimitiveKind(IntEnum):
    """Tag identifying which primitive variant a hit came from."""

    NONE = -1
    SPHERE = 0
    PLANE = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: Distance along the ray to the nearest hit. Only valid if hit == 1.
        point: The nearest hit point. Only valid if hit == 1.
        normal: The unit surface normal at the hit. Only valid if hit == 1.
        kind: The PrimitiveKind of the hit primitive (-1 for a miss).
        index: Index of the hit primitive within its kind (-1 for a miss).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    kind: ti.i32
    index: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_PLANES = 64

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage
plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())


# Storage is shared by the whole process: freezes are counted here, not per
# SceneManager, and every mutation bumps the revision
_freeze_count = 0
_revision = 0


def freeze_scene() -> None:
    """Make the primitive storage read-only until a matching unfreeze_scene()."""
    global _freeze_count
    _freeze_count += 1


def unfreeze_scene() -> None:
    """Release one freeze_scene() call."""
    global _freeze_count
    if _freeze_count == 0:
        raise RuntimeError("unfreeze_scene() called without a matching freeze_scene()")
    _freeze_count -= 1


def is_scene_frozen() -> bool:
    """Whether any freeze is active."""
    return _freeze_count > 0


def get_scene_revision() -> int:
    """Counter incremented by every clear or addition."""
    return _revision


def _begin_mutation() -> None:
    global _revision
    if _freeze_count > 0:
        raise RuntimeError("Scene is frozen while rendering; it cannot be modified")
    _revision += 1


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero. The field data itself is left in
    place and overwritten as new primitives are added.

    Raises:
        RuntimeError: If the scene is frozen.
    """
    _begin_mutation()
    num_spheres[None] = 0
    num_planes[None] = 0


def add_sphere(center: vec3, radius: float) -> int:
    """Add a sphere to the scene.

    No validation happens here; SceneManager.add_sphere checks the radius.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the scene is frozen or the maximum number of
            spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    _begin_mutation()
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    num_spheres[None] = idx + 1
    return idx


def add_plane(point: vec3, normal: vec3) -> int:
    """Add a plane to the scene.

    Args:
        point: Any point on the plane.
        normal: The unit normal of the plane (not re-normalized here).

    Returns:
        The index of the added plane.

    Raises:
        RuntimeError: If the scene is frozen or the maximum number of
            planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    _begin_mutation()
    plane_points[idx] = point
    plane_normals[idx] = normal
    num_planes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


@ti.func
def _to_scene_hit_record(rec: HitRecord, kind: ti.i32, index: ti.i32) -> SceneHitRecord:
    """Tag a primitive HitRecord with the primitive it came from."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        kind=kind,
        index=index,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        kind=int(PrimitiveKind.NONE),
        index=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the nearest hit along a ray.

    Tests every sphere, then every plane, shrinking the search interval to
    the closest hit found so far, so the nearest hit wins. Exact ties keep
    the primitive tested first.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, int(PrimitiveKind.SPHERE), i)

    n_planes = num_planes[None]
    for i in range(n_planes):
        plane = Plane(point=plane_points[i], normal=plane_normals[i])
        rec = hit_plane(ray_origin, ray_direction, plane, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, int(PrimitiveKind.PLANE), i)

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Test if a ray hits any primitive in (t_min, t_max).

    Stops testing once anything is hit; useful when only visibility matters.

    Returns:
        1 if any primitive was hit, 0 otherwise.
    """
    hit_any = 0

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        if hit_any == 0:
            sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
            rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    n_planes = num_planes[None]
    for i in range(n_planes):
        if hit_any == 0:
            plane = Plane(point=plane_points[i], normal=plane_normals[i])
            rec = hit_plane(ray_origin, ray_direction, plane, t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    return hit_any

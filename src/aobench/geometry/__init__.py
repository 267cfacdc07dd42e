"""Geometry module for the benchmark's shape primitives.

Components:
    sphere: Sphere primitive, the shared HitRecord, and ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

All intersection routines are Taichi functions (@ti.func) so they can be
called from the render kernels. Every test follows the same shape:

    record = hit_<shape>(ray_origin, ray_direction, shape, t_min, t_max)

and reports a hit only for distances strictly inside (t_min, t_max).
"""

from .plane import Plane, hit_plane, make_plane
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "Plane",
    "hit_plane",
    "make_plane",
]

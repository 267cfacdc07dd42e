"""Core rendering components for the ambient occlusion benchmark.

Components:
    ray: Ray dataclass, vector operations and hemisphere helpers
    sampler: Counter-seeded PCG random streams (device and host)
    occlusion: Ambient occlusion estimator
    integrator: Per-pixel shading and the row-band render kernel
    renderer: AORenderer, which drives a full frame band by band

Only the leaf modules are re-exported here; occlusion, integrator and renderer
depend on the scene and camera fields and are imported from their modules.
"""

from .ray import (
    Ray,
    Vec3Tuple,
    build_onb_from_normal,
    cosine_direction,
    local_to_world,
    make_ray,
    normalize,
    ray_at,
    vec3,
    vec_normalize,
)
from .sampler import RandomStream, next_float, seed_stream

__all__ = [
    "Ray",
    "Vec3Tuple",
    "vec3",
    "make_ray",
    "ray_at",
    "normalize",
    "build_onb_from_normal",
    "local_to_world",
    "cosine_direction",
    "vec_normalize",
    "RandomStream",
    "seed_stream",
    "next_float",
]

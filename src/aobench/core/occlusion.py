"""Ambient occlusion estimation by hemisphere sampling.

At a surface point the shader casts occlusion rays over the hemisphere above
the normal and reports the fraction of rays that escape the scene:

    1.0  fully open to the sky
    0.0  fully enclosed

Directions are cosine-weighted (Malley's method), so rays near the normal
count for more, which matches the cosine-weighted visibility integral. The
(radius^2, phi) square is divided into an n x n grid and one jittered sample
is taken per cell, which lowers variance compared to independent samples.

Occlusion rays start slightly above the surface (OCCLUSION_EPSILON along the
normal) so they do not immediately re-hit the surface they leave.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aobench.scene.manager import SceneManager
    >>> from aobench.core.occlusion import occlusion_at
    >>> scene = SceneManager()
    >>> occlusion_at((0, 0, 0), (0, 1, 0), ao_samples=8)  # nothing around
    1.0
"""

import taichi as ti
import taichi.math as tm

from aobench.config import DEFAULT_AO_SAMPLES, DEFAULT_MAX_DISTANCE, OcclusionFalloff, RenderConfig
from aobench.core.ray import (
    Vec3Tuple,
    build_onb_from_normal,
    cosine_direction,
    local_to_world,
    vec_normalize,
)
from aobench.core.sampler import next_float, seed_stream
from aobench.scene.intersection import intersect_scene, intersect_scene_any

# Type alias for 3D vectors
vec3 = tm.vec3

# Occlusion rays start this far above the surface along the normal
OCCLUSION_EPSILON = 1e-4

# t_min and t_max for ray intersection
T_MIN = 1e-4
T_MAX = 1e10


@ti.func
def ambient_occlusion(
    point: vec3,
    normal: vec3,
    state: ti.u32,
    n_samples: ti.i32,
    max_distance: ti.f32,
    falloff: ti.i32,
):
    """Estimate ambient occlusion at a surface point.

    Args:
        point: The surface point.
        normal: The unit surface normal at point.
        state: Random stream state (see aobench.core.sampler).
        n_samples: Samples per axis of the stratified grid; n_samples^2
            occlusion rays are cast.
        max_distance: Hits farther than this do not occlude.
        falloff: An OcclusionFalloff value. BINARY treats any hit as fully
            occluding; LINEAR weights a hit at distance t by t / max_distance.

    Returns:
        A tuple (intensity, next_state) with intensity in [0, 1].
    """
    tangent, bitangent, n = build_onb_from_normal(normal)
    origin = point + OCCLUSION_EPSILON * normal

    rng = state
    inv_n = 1.0 / ti.cast(n_samples, ti.f32)
    total = 0.0

    for k in range(n_samples * n_samples):
        cell_r = k // n_samples
        cell_phi = k % n_samples

        r1 = 0.0
        r2 = 0.0
        r1, rng = next_float(rng)
        r2, rng = next_float(rng)
        u1 = (ti.cast(cell_r, ti.f32) + r1) * inv_n
        u2 = (ti.cast(cell_phi, ti.f32) + r2) * inv_n

        direction = local_to_world(cosine_direction(u1, u2), tangent, bitangent, n)

        contribution = 1.0
        if falloff == int(OcclusionFalloff.LINEAR):
            rec = intersect_scene(origin, direction, T_MIN, max_distance)
            if rec.hit == 1:
                contribution = rec.t / max_distance
        else:
            if intersect_scene_any(origin, direction, T_MIN, max_distance) == 1:
                contribution = 0.0

        total += contribution

    return total * inv_n * inv_n, rng


@ti.kernel
def _occlusion_at_kernel(
    px: ti.f32,
    py: ti.f32,
    pz: ti.f32,
    nx: ti.f32,
    ny: ti.f32,
    nz: ti.f32,
    ao_samples: ti.i32,
    seed: ti.u32,
    max_distance: ti.f32,
    falloff: ti.i32,
) -> ti.f32:
    state = seed_stream(seed, 0)
    value, _ = ambient_occlusion(
        vec3(px, py, pz), vec3(nx, ny, nz), state, ao_samples, max_distance, falloff
    )
    return value


def occlusion_at(
    point: Vec3Tuple,
    normal: Vec3Tuple,
    *,
    ao_samples: int = DEFAULT_AO_SAMPLES,
    seed: int = 0,
    max_distance: float = DEFAULT_MAX_DISTANCE,
    falloff: OcclusionFalloff = OcclusionFalloff.BINARY,
) -> float:
    """Estimate ambient occlusion at a single point of the current scene.

    Uses the same estimator as the renderer, with the stream of unit 0
    under ``seed``. Intended for tests and diagnostics.

    Args:
        point: The surface point.
        normal: The surface normal (normalized here).
        ao_samples: Samples per axis of the stratified grid.
        seed: Base seed of the random stream.
        max_distance: Hits farther than this do not occlude.
        falloff: Contribution policy for occlusion hits.

    Returns:
        The estimated intensity in [0, 1].

    Raises:
        InvalidConfigurationError: If the sampling settings are invalid.
        DegenerateGeometryError: If the normal has zero length.
    """
    RenderConfig(
        ao_samples=ao_samples, seed=seed, max_distance=max_distance, falloff=falloff
    ).validate()
    n = vec_normalize(tuple(float(c) for c in normal))

    return float(
        _occlusion_at_kernel(
            float(point[0]),
            float(point[1]),
            float(point[2]),
            n[0],
            n[1],
            n[2],
            ao_samples,
            seed,
            max_distance,
            int(falloff),
        )
    )

"""Scene module for primitive storage and ray-scene queries.

Components:
    intersection: Primitive storage in Taichi fields and nearest-hit queries
    manager: SceneManager, which validates, records and freezes primitives
    aobench_scene: The fixed benchmark scenes

Scene data is kept in a Structure-of-Arrays layout in Taichi fields, which the
render kernels read directly. The scene must not change while a render is in
progress; SceneManager.frozen() enforces this.
"""

from .aobench_scene import (
    AOBENCH_SPHERE_CENTERS,
    AOBENCH_SPHERE_RADIUS,
    create_aobench_scene,
    create_single_sphere_scene,
)
from .intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    PrimitiveKind,
    SceneHitRecord,
    add_plane,
    add_sphere,
    clear_scene,
    freeze_scene,
    get_plane_count,
    get_scene_revision,
    get_sphere_count,
    intersect_scene,
    intersect_scene_any,
    is_scene_frozen,
    unfreeze_scene,
)
from .manager import PlaneInfo, SceneConfig, SceneManager, SphereInfo

__all__ = [
    # Intersection module
    "PrimitiveKind",
    "SceneHitRecord",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "freeze_scene",
    "unfreeze_scene",
    "is_scene_frozen",
    "get_scene_revision",
    "get_sphere_count",
    "get_plane_count",
    "intersect_scene",
    "intersect_scene_any",
    "MAX_SPHERES",
    "MAX_PLANES",
    # Manager module
    "SceneManager",
    "SphereInfo",
    "PlaneInfo",
    "SceneConfig",
    # Benchmark scenes
    "create_aobench_scene",
    "create_single_sphere_scene",
    "AOBENCH_SPHERE_CENTERS",
    "AOBENCH_SPHERE_RADIUS",
]

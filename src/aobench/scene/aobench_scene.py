"""Fixed scenes used by the ambient occlusion benchmark.

create_aobench_scene() builds the classic benchmark scene:
- Three spheres of radius 0.5 resting on the ground, at increasing distance
  from the left edge of the frame
- An infinite ground plane at y = -0.5 facing up
- A camera at the origin looking down -z with a 90 degree field of view

create_single_sphere_scene() builds a smaller scene used to check the
renderer: one sphere at the origin resting on the same ground plane, seen
from z = 3. The sphere's upper half is open to the sky while the ground near
the contact point is strongly occluded, which makes it easy to verify that
the shading goes the right way.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aobench.scene.aobench_scene import create_aobench_scene
    >>> from aobench.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_aobench_scene()
    >>> setup_camera(camera)
"""

from aobench.camera.pinhole import PinholeCamera
from aobench.core.ray import Vec3Tuple
from aobench.scene.manager import SceneManager

# =============================================================================
# Benchmark Scene Parameters
# =============================================================================

AOBENCH_SPHERE_RADIUS = 0.5

AOBENCH_SPHERE_CENTERS: tuple[Vec3Tuple, ...] = (
    (-2.0, 0.0, -3.5),
    (-0.5, 0.0, -3.0),
    (1.0, 0.0, -2.2),
)

GROUND_POINT: Vec3Tuple = (0.0, -0.5, 0.0)
GROUND_NORMAL: Vec3Tuple = (0.0, 1.0, 0.0)


def create_aobench_scene(aspect_ratio: float = 1.0) -> tuple[SceneManager, PinholeCamera]:
    """Create the classic ambient occlusion benchmark scene.

    Args:
        aspect_ratio: Image width divided by height.

    Returns:
        A tuple (scene, camera). Call setup_camera(camera) before rendering;
        AORenderer does this automatically.
    """
    scene = SceneManager()

    for center in AOBENCH_SPHERE_CENTERS:
        scene.add_sphere(center, AOBENCH_SPHERE_RADIUS)

    scene.add_plane(GROUND_POINT, GROUND_NORMAL)

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )

    return scene, camera


def create_single_sphere_scene(aspect_ratio: float = 1.0) -> tuple[SceneManager, PinholeCamera]:
    """Create a single sphere resting on the ground plane.

    The sphere (radius 0.5) is centered at the origin and touches the
    ground plane y = -0.5. The camera looks at the origin from z = 3 with a
    30 degree field of view, so the sphere fills the middle of the frame and
    the top rows see only the sky.

    Args:
        aspect_ratio: Image width divided by height.

    Returns:
        A tuple (scene, camera).
    """
    scene = SceneManager()
    scene.add_sphere((0.0, 0.0, 0.0), AOBENCH_SPHERE_RADIUS)
    scene.add_plane(GROUND_POINT, GROUND_NORMAL)

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=30.0,
        aspect_ratio=aspect_ratio,
    )

    return scene, camera

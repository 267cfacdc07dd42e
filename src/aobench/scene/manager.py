"""Scene manager for building and freezing the benchmark scene.

This module provides a high-level API on top of the primitive storage in
aobench.scene.intersection. The SceneManager validates primitives before they
reach the Taichi fields, keeps a host-side record of every primitive in the
order it was added, serializes the scene to and from plain dictionaries, and
freezes the scene while a render is in progress.

The scene is immutable during rendering: while frozen, any attempt to add
primitives or clear the scene raises RuntimeError.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aobench.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5)
    0
    >>> scene.add_plane(point=(0, -0.5, 0), normal=(0, 1, 0))
    0
    >>> with scene.frozen():
    ...     pass  # render here
"""

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import taichi.math as tm

from aobench.core.ray import Vec3Tuple, vec_normalize
from aobench.errors import DegenerateGeometryError
from aobench.scene.intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    PrimitiveKind,
    add_plane,
    add_sphere,
    clear_scene,
    freeze_scene,
    get_plane_count,
    get_scene_revision,
    get_sphere_count,
    is_scene_frozen,
    unfreeze_scene,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
    """

    sphere_index: int
    center: Vec3Tuple
    radius: float

    @property
    def kind(self) -> PrimitiveKind:
        return PrimitiveKind.SPHERE


@dataclass(frozen=True)
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        plane_index: The index in the plane storage arrays.
        point: A point on the plane.
        normal: The unit normal of the plane.
    """

    plane_index: int
    point: Vec3Tuple
    normal: Vec3Tuple

    @property
    def kind(self) -> PrimitiveKind:
        return PrimitiveKind.PLANE


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        spheres: List of sphere configurations ({"center", "radius"}).
        planes: List of plane configurations ({"point", "normal"}).
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)


def _as_vec3_tuple(value: Any, name: str) -> Vec3Tuple:
    """Convert a 3-element sequence to a float tuple, rejecting non-finite input."""
    try:
        x, y, z = (float(c) for c in value)
    except (TypeError, ValueError):
        raise DegenerateGeometryError(f"{name} must be a 3-component vector, got {value!r}") from None
    if not all(math.isfinite(c) for c in (x, y, z)):
        raise DegenerateGeometryError(f"{name} must be finite, got {(x, y, z)}")
    return (x, y, z)


class SceneManager:
    """Scene builder coordinating primitive validation and storage.

    Primitive storage lives in module-level Taichi fields, so there is one
    scene per process; creating a SceneManager clears it. Freezing any
    manager freezes that storage, so no other manager can modify it either.

    Attributes:
        spheres: List of SphereInfo for all spheres in the scene.
        planes: List of PlaneInfo for all planes in the scene.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_sphere((-0.5, 0.0, -3.0), 0.5)
        0
        >>> scene.add_plane((0.0, -0.5, 0.0), (0.0, 1.0, 0.0))
        0
        >>> scene.get_primitive_count()
        2
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self._primitives: list[SphereInfo | PlaneInfo] = []
        self._frozen = False
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        self.spheres.clear()
        self.planes.clear()
        self._primitives.clear()

    def _check_mutable(self) -> None:
        if self._frozen or is_scene_frozen():
            raise RuntimeError("Scene is frozen while rendering; it cannot be modified")

    def clear(self) -> None:
        """Remove every primitive from the scene.

        Raises:
            RuntimeError: If the scene is frozen.
        """
        self._check_mutable()
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Freezing
    # =========================================================================

    @property
    def is_frozen(self) -> bool:
        """Whether the scene is currently read-only."""
        return self._frozen

    @contextmanager
    def frozen(self) -> Iterator["SceneManager"]:
        """Make the scene read-only for the duration of a with-block.

        Nested use is allowed; the scene becomes mutable again only when the
        outermost block exits. Inside the block every attempt to modify the
        primitive storage raises RuntimeError, whether it comes from this
        manager, another SceneManager or aobench.scene.intersection directly.
        """
        previous = self._frozen
        freeze_scene()
        self._frozen = True
        try:
            yield self
        finally:
            self._frozen = previous
            unfreeze_scene()

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(self, center: Vec3Tuple, radius: float) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            DegenerateGeometryError: If the radius is not positive and
                finite, or the center is not a finite 3-vector.
            RuntimeError: If the scene is frozen or the maximum number of
                spheres is exceeded.
        """
        self._check_mutable()
        center_t = _as_vec3_tuple(center, "Sphere center")
        radius = float(radius)
        if not math.isfinite(radius) or radius <= 0.0:
            raise DegenerateGeometryError(f"Sphere radius must be positive and finite, got {radius}")

        sphere_index = add_sphere(vec3(*center_t), radius)

        info = SphereInfo(sphere_index=sphere_index, center=center_t, radius=radius)
        self.spheres.append(info)
        self._primitives.append(info)
        logger.debug(f"Added sphere {sphere_index}: center={center_t} radius={radius}")

        return sphere_index

    def add_plane(self, point: Vec3Tuple, normal: Vec3Tuple) -> int:
        """Add an infinite plane to the scene.

        The normal is normalized before it is stored.

        Args:
            point: Any point on the plane as (x, y, z).
            normal: The plane normal as (x, y, z); need not be unit length.

        Returns:
            The index of the added plane.

        Raises:
            DegenerateGeometryError: If the normal has zero length or any
                component is not finite.
            RuntimeError: If the scene is frozen or the maximum number of
                planes is exceeded.
        """
        self._check_mutable()
        point_t = _as_vec3_tuple(point, "Plane point")
        normal_t = vec_normalize(_as_vec3_tuple(normal, "Plane normal"))

        plane_index = add_plane(vec3(*point_t), vec3(*normal_t))

        info = PlaneInfo(plane_index=plane_index, point=point_t, normal=normal_t)
        self.planes.append(info)
        self._primitives.append(info)
        logger.debug(f"Added plane {plane_index}: point={point_t} normal={normal_t}")

        return plane_index

    @property
    def primitives(self) -> tuple[SphereInfo | PlaneInfo, ...]:
        """All primitives in the order they were added."""
        return tuple(self._primitives)

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return get_plane_count()

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count() + self.get_plane_count()

    @property
    def revision(self) -> int:
        """Counter that changes whenever the primitive storage is modified."""
        return get_scene_revision()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                }
            )

        for plane in self.planes:
            config.planes.append(
                {
                    "point": list(plane.point),
                    "normal": list(plane.normal),
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Raises:
            DegenerateGeometryError: If the configuration contains
                degenerate primitives.
            RuntimeError: If the scene is frozen.
        """
        self.clear()

        for sphere_config in config.spheres:
            center = sphere_config.get("center", [0.0, 0.0, 0.0])
            radius = sphere_config.get("radius", 1.0)
            self.add_sphere(center, radius)

        for plane_config in config.planes:
            point = plane_config.get("point", [0.0, 0.0, 0.0])
            normal = plane_config.get("normal", [0.0, 1.0, 0.0])
            self.add_plane(point, normal)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "spheres": config.spheres,
            "planes": config.planes,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'spheres' and 'planes' keys."""
        config = SceneConfig(
            spheres=data.get("spheres", []),
            planes=data.get("planes", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_planes() -> int:
        """Get the maximum number of planes supported."""
        return MAX_PLANES

    def __repr__(self) -> str:
        return (
            f"SceneManager(spheres={len(self.spheres)}, planes={len(self.planes)}, "
            f"frozen={self._frozen})"
        )

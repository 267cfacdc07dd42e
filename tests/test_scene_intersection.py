"""Unit tests for scene-level intersection.

Tests cover:
- Primitive storage (add/clear/count, capacity limits)
- Nearest-hit selection across spheres and planes
- Primitive kind and index reporting
- Any-hit queries
"""

import pytest
import taichi as ti


def _intersect(origin, direction, t_min=1e-4, t_max=1e10):
    """Run intersect_scene for one ray and return the record as a dict."""
    from aobench.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    kind = ti.field(dtype=ti.i32, shape=())
    index = ti.field(dtype=ti.i32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        t_lo: ti.f32, t_hi: ti.f32,
    ):
        rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz), t_lo, t_hi)
        hit[None] = rec.hit
        t_val[None] = rec.t
        kind[None] = rec.kind
        index[None] = rec.index
        normal[None] = rec.normal

    test_kernel(*origin, *direction, t_min, t_max)
    n = normal[None]
    return {
        "hit": int(hit[None]),
        "t": float(t_val[None]),
        "kind": int(kind[None]),
        "index": int(index[None]),
        "normal": (float(n[0]), float(n[1]), float(n[2])),
    }


def _intersect_any(origin, direction, t_min=1e-4, t_max=1e10):
    from aobench.scene.intersection import intersect_scene_any, vec3

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        t_lo: ti.f32, t_hi: ti.f32,
    ):
        result[None] = intersect_scene_any(vec3(ox, oy, oz), vec3(dx, dy, dz), t_lo, t_hi)

    test_kernel(*origin, *direction, t_min, t_max)
    return int(result[None])


class TestPrimitiveStorage:
    """Tests for adding and clearing primitives."""

    def test_add_sphere_returns_index(self):
        from aobench.scene.intersection import add_sphere, get_sphere_count, vec3

        assert add_sphere(vec3(0.0, 0.0, -1.0), 0.5) == 0
        assert add_sphere(vec3(1.0, 0.0, -1.0), 0.5) == 1
        assert get_sphere_count() == 2

    def test_add_plane_returns_index(self):
        from aobench.scene.intersection import add_plane, get_plane_count, vec3

        assert add_plane(vec3(0.0, -0.5, 0.0), vec3(0.0, 1.0, 0.0)) == 0
        assert get_plane_count() == 1

    def test_clear_scene(self):
        from aobench.scene.intersection import (
            add_plane,
            add_sphere,
            clear_scene,
            get_plane_count,
            get_sphere_count,
            vec3,
        )

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5)
        add_plane(vec3(0.0, -0.5, 0.0), vec3(0.0, 1.0, 0.0))
        clear_scene()
        assert get_sphere_count() == 0
        assert get_plane_count() == 0

    def test_plane_capacity(self):
        from aobench.scene.intersection import MAX_PLANES, add_plane, vec3

        for _ in range(MAX_PLANES):
            add_plane(vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
        with pytest.raises(RuntimeError, match="Maximum number of planes"):
            add_plane(vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

    def test_freeze_blocks_mutation(self):
        from aobench.scene.intersection import (
            add_sphere,
            clear_scene,
            freeze_scene,
            get_sphere_count,
            is_scene_frozen,
            unfreeze_scene,
            vec3,
        )

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5)
        freeze_scene()
        freeze_scene()
        try:
            unfreeze_scene()
            assert is_scene_frozen()
            with pytest.raises(RuntimeError, match="frozen"):
                clear_scene()
        finally:
            unfreeze_scene()
        assert not is_scene_frozen()
        assert get_sphere_count() == 1

    def test_unbalanced_unfreeze(self):
        from aobench.scene.intersection import unfreeze_scene

        with pytest.raises(RuntimeError, match="without a matching"):
            unfreeze_scene()


class TestIntersectScene:
    """Tests for nearest-hit queries."""

    def test_empty_scene_misses(self):
        from aobench.scene.intersection import PrimitiveKind

        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 0
        assert rec["kind"] == int(PrimitiveKind.NONE)
        assert rec["index"] == -1

    def test_nearest_sphere_wins(self):
        """Test the closer of two spheres along the ray is reported."""
        from aobench.scene.intersection import PrimitiveKind, add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -10.0), 1.0)  # index 0, far
        add_sphere(vec3(0.0, 0.0, -5.0), 1.0)  # index 1, near

        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 1
        assert rec["kind"] == int(PrimitiveKind.SPHERE)
        assert rec["index"] == 1
        assert rec["t"] == pytest.approx(4.0, abs=1e-5)

    def test_plane_in_front_of_sphere(self):
        """Test a plane closer than a sphere is the reported hit."""
        from aobench.scene.intersection import PrimitiveKind, add_plane, add_sphere, vec3

        add_sphere(vec3(0.0, -3.0, 0.0), 0.5)
        add_plane(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        rec = _intersect((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert rec["hit"] == 1
        assert rec["kind"] == int(PrimitiveKind.PLANE)
        assert rec["index"] == 0
        assert rec["t"] == pytest.approx(1.0, abs=1e-6)
        assert rec["normal"] == pytest.approx((0.0, 1.0, 0.0))

    def test_sphere_in_front_of_plane(self):
        from aobench.scene.intersection import PrimitiveKind, add_plane, add_sphere, vec3

        add_plane(vec3(0.0, -0.5, 0.0), vec3(0.0, 1.0, 0.0))
        add_sphere(vec3(0.0, 0.0, -3.0), 0.5)

        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 1
        assert rec["kind"] == int(PrimitiveKind.SPHERE)
        assert rec["t"] == pytest.approx(2.5, abs=1e-5)
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)

    def test_t_max_limits_search(self):
        from aobench.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -5.0), 1.0)
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=3.0)
        assert rec["hit"] == 0


class TestIntersectSceneAny:
    """Tests for any-hit queries."""

    def test_any_hit(self):
        from aobench.scene.intersection import add_plane, add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -5.0), 1.0)
        add_plane(vec3(0.0, -0.5, 0.0), vec3(0.0, 1.0, 0.0))

        assert _intersect_any((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == 1
        assert _intersect_any((0.0, 0.0, 0.0), (0.0, -1.0, 0.0)) == 1
        assert _intersect_any((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == 0

    def test_any_hit_respects_range(self):
        from aobench.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -5.0), 1.0)
        assert _intersect_any((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=3.0) == 0

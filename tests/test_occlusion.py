"""Unit tests for the ambient occlusion estimator.

Tests cover:
- Unoccluded points
- The analytic half-occluded configuration
- Variance reduction with more samples
- Linear falloff and occlusion range
- Determinism and argument validation
"""

import statistics

import pytest


def _ground_and_sphere(scene):
    """Ground plane y=-0.5 with a unit-diameter sphere resting on it at the origin."""
    scene.add_sphere((0.0, 0.0, 0.0), 0.5)
    scene.add_plane((0.0, -0.5, 0.0), (0.0, 1.0, 0.0))


# A point on the ground next to the sphere, partially occluded by it
NEAR_CONTACT = (0.6, -0.5, 0.0)
UP = (0.0, 1.0, 0.0)


class TestUnoccluded:
    """Points that nothing can occlude."""

    @pytest.mark.parametrize("ao_samples", [1, 2, 3, 8])
    def test_empty_scene_is_fully_open(self, fresh_scene, ao_samples):
        from aobench.core.occlusion import occlusion_at

        value = occlusion_at((0.0, 0.0, 0.0), UP, ao_samples=ao_samples, seed=5)
        assert value == pytest.approx(1.0, abs=1e-6)

    def test_geometry_behind_surface_does_not_occlude(self, fresh_scene):
        """Test the hemisphere only looks above the normal."""
        from aobench.core.occlusion import occlusion_at

        fresh_scene.add_plane((0.0, -0.5, 0.0), (0.0, 1.0, 0.0))
        fresh_scene.add_sphere((0.0, -3.0, 0.0), 1.0)

        value = occlusion_at((0.0, 0.0, 0.0), UP, ao_samples=8)
        assert value == pytest.approx(1.0, abs=1e-6)

    def test_top_of_sphere_is_open(self, fresh_scene):
        from aobench.core.occlusion import occlusion_at

        _ground_and_sphere(fresh_scene)
        value = occlusion_at((0.0, 0.5, 0.0), UP, ao_samples=8)
        assert value == pytest.approx(1.0, abs=1e-6)


class TestOccluded:
    """Points with occluders above the surface."""

    def test_half_space_occluder(self, fresh_scene):
        """Test a point with a plane cutting its hemisphere in half gives ~0.5."""
        from aobench.core.occlusion import occlusion_at

        fresh_scene.add_plane((0.0, -0.01, 0.0), (0.0, 1.0, 0.0))
        value = occlusion_at((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), ao_samples=32, seed=1)
        assert value == pytest.approx(0.5, abs=0.05)

    def test_near_contact_is_darker(self, fresh_scene):
        from aobench.core.occlusion import occlusion_at

        _ground_and_sphere(fresh_scene)
        value = occlusion_at(NEAR_CONTACT, UP, ao_samples=16)
        assert 0.0 < value < 1.0

    def test_variance_shrinks_with_more_samples(self, fresh_scene):
        from aobench.core.occlusion import occlusion_at

        _ground_and_sphere(fresh_scene)

        coarse = [occlusion_at(NEAR_CONTACT, UP, ao_samples=2, seed=s) for s in range(10)]
        fine = [occlusion_at(NEAR_CONTACT, UP, ao_samples=16, seed=s) for s in range(10)]

        assert statistics.pstdev(fine) < statistics.pstdev(coarse)
        assert all(v < 1.0 for v in fine)

    def test_values_in_unit_interval(self, fresh_scene):
        from aobench.core.occlusion import occlusion_at

        _ground_and_sphere(fresh_scene)
        for seed in range(5):
            value = occlusion_at(NEAR_CONTACT, UP, ao_samples=4, seed=seed)
            assert 0.0 <= value <= 1.0


class TestFalloff:
    """Tests for the occlusion range and contribution policy."""

    def test_linear_is_never_darker_than_binary(self, fresh_scene):
        from aobench.config import OcclusionFalloff
        from aobench.core.occlusion import occlusion_at

        _ground_and_sphere(fresh_scene)
        binary = occlusion_at(
            NEAR_CONTACT, UP, ao_samples=8, max_distance=2.0, falloff=OcclusionFalloff.BINARY
        )
        linear = occlusion_at(
            NEAR_CONTACT, UP, ao_samples=8, max_distance=2.0, falloff=OcclusionFalloff.LINEAR
        )
        assert linear >= binary
        assert linear < 1.0

    def test_short_range_ignores_distant_occluders(self, fresh_scene):
        """Test occluders beyond max_distance do not count."""
        from aobench.config import OcclusionFalloff
        from aobench.core.occlusion import occlusion_at

        _ground_and_sphere(fresh_scene)
        # The sphere's surface is ~0.28 away from NEAR_CONTACT
        for falloff in OcclusionFalloff:
            value = occlusion_at(NEAR_CONTACT, UP, ao_samples=8, max_distance=0.1, falloff=falloff)
            assert value == pytest.approx(1.0, abs=1e-6)


class TestDeterminism:
    """Tests for reproducibility."""

    def test_same_seed_same_value(self, fresh_scene):
        from aobench.core.occlusion import occlusion_at

        _ground_and_sphere(fresh_scene)
        a = occlusion_at(NEAR_CONTACT, UP, ao_samples=3, seed=77)
        b = occlusion_at(NEAR_CONTACT, UP, ao_samples=3, seed=77)
        assert a == b

    def test_seed_changes_estimate(self, fresh_scene):
        from aobench.core.occlusion import occlusion_at

        _ground_and_sphere(fresh_scene)
        values = {occlusion_at(NEAR_CONTACT, UP, ao_samples=2, seed=s) for s in range(10)}
        assert len(values) > 1


class TestValidation:
    """Tests for argument validation."""

    def test_rejects_zero_samples(self, fresh_scene):
        from aobench.core.occlusion import occlusion_at
        from aobench.errors import InvalidConfigurationError

        with pytest.raises(InvalidConfigurationError, match="ao_samples"):
            occlusion_at((0.0, 0.0, 0.0), UP, ao_samples=0)

    def test_rejects_bad_max_distance(self, fresh_scene):
        from aobench.core.occlusion import occlusion_at
        from aobench.errors import InvalidConfigurationError

        with pytest.raises(InvalidConfigurationError, match="max_distance"):
            occlusion_at((0.0, 0.0, 0.0), UP, max_distance=-1.0)

    def test_rejects_zero_normal(self, fresh_scene):
        from aobench.core.occlusion import occlusion_at
        from aobench.errors import DegenerateGeometryError

        with pytest.raises(DegenerateGeometryError):
            occlusion_at((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

"""Unit tests for the band-by-band AORenderer.

Tests cover:
- Initialization and configuration validation
- Rendering with and without callbacks
- Generator-based progress and cancellation
- Scene freezing during rendering
- Reset and reproducibility
"""

from dataclasses import replace

import numpy as np
import pytest


@pytest.fixture
def renderer(small_config):
    """Renderer over the single-sphere scene with a small configuration."""
    from aobench.core.renderer import AORenderer
    from aobench.scene.aobench_scene import create_single_sphere_scene

    scene, camera = create_single_sphere_scene()
    return AORenderer(scene, camera, small_config)


class TestAORendererInit:
    """Tests for renderer construction."""

    def test_dimensions(self, renderer, small_config):
        assert renderer.width == small_config.width
        assert renderer.height == small_config.height
        assert renderer.rows_done == 0
        assert not renderer.is_complete

    def test_camera_aspect_follows_image(self, renderer, small_config):
        assert renderer.camera.aspect_ratio == pytest.approx(16 / 12)

    def test_default_config(self):
        from aobench.config import DEFAULT_HEIGHT, DEFAULT_WIDTH
        from aobench.core.renderer import AORenderer
        from aobench.scene.aobench_scene import create_aobench_scene

        scene, camera = create_aobench_scene()
        r = AORenderer(scene, camera)
        assert (r.width, r.height) == (DEFAULT_WIDTH, DEFAULT_HEIGHT)

    def test_invalid_config_rejected(self, fresh_scene):
        from aobench.camera.pinhole import PinholeCamera
        from aobench.config import RenderConfig
        from aobench.core.renderer import AORenderer
        from aobench.errors import InvalidConfigurationError

        with pytest.raises(InvalidConfigurationError, match="width"):
            AORenderer(fresh_scene, PinholeCamera(), RenderConfig(width=0))

    def test_image_unavailable_before_render(self, renderer):
        with pytest.raises(RuntimeError, match="incomplete"):
            _ = renderer.image

    def test_repr(self, renderer):
        assert repr(renderer) == "AORenderer(width=16, height=12, rows_done=0)"


class TestAORendererRender:
    """Tests for one-shot rendering."""

    def test_render_returns_image(self, renderer, small_config):
        image = renderer.render()
        assert image.shape == (small_config.height, small_config.width, 3)
        assert image.dtype == np.uint8
        assert renderer.is_complete
        assert renderer.image is image

    def test_callback_receives_progress(self, renderer):
        calls = []
        renderer.render(callback=lambda done, total: calls.append((done, total)))
        assert calls == [(5, 12), (10, 12), (12, 12)]

    def test_render_when_complete_is_noop(self, renderer):
        first = renderer.render().copy()
        calls = []
        second = renderer.render(callback=lambda done, total: calls.append(done))
        assert calls == []
        np.testing.assert_array_equal(first, second)

    def test_scene_unfrozen_after_render(self, renderer):
        renderer.render()
        assert not renderer.scene.is_frozen

    def test_elapsed_recorded(self, renderer):
        renderer.render()
        assert renderer.elapsed > 0.0


class TestAORendererGenerator:
    """Tests for render_progressive."""

    def test_yields_band_progress(self, renderer):
        progress = list(renderer.render_progressive())
        assert progress == [(5, 12), (10, 12), (12, 12)]
        assert renderer.is_complete

    def test_scene_frozen_while_rendering(self, renderer):
        gen = renderer.render_progressive()
        next(gen)
        assert renderer.scene.is_frozen
        with pytest.raises(RuntimeError, match="frozen"):
            renderer.scene.add_sphere((2.0, 0.0, 0.0), 0.5)
        gen.close()
        assert not renderer.scene.is_frozen

    def test_cancel_leaves_complete_bands(self, renderer):
        gen = renderer.render_progressive()
        assert next(gen) == (5, 12)
        gen.close()

        assert renderer.rows_done == 5
        assert not renderer.is_complete
        with pytest.raises(RuntimeError):
            _ = renderer.image

    def test_resume_after_cancel_matches_uninterrupted(self, small_config):
        from aobench.core.renderer import AORenderer
        from aobench.scene.aobench_scene import create_single_sphere_scene

        scene, camera = create_single_sphere_scene()
        reference = AORenderer(scene, camera, small_config).render().copy()

        interrupted = AORenderer(scene, camera, small_config)
        gen = interrupted.render_progressive()
        next(gen)
        next(gen)
        gen.close()
        assert interrupted.rows_done == 10

        np.testing.assert_array_equal(interrupted.render(), reference)

    def test_new_scene_rejected_mid_render(self, renderer):
        """Test the primitives cannot be replaced between bands."""
        from aobench.scene.manager import SceneManager

        undisturbed = renderer.render().copy()
        renderer.reset()

        gen = renderer.render_progressive()
        next(gen)
        with pytest.raises(RuntimeError, match="frozen"):
            SceneManager()
        for _ in gen:
            pass

        assert renderer.scene.get_primitive_count() == 2
        np.testing.assert_array_equal(renderer.image, undisturbed)

    def test_resume_after_scene_change_restarts(self, small_config):
        """Test rows rendered before a scene change are not mixed with new ones."""
        from aobench.core.renderer import AORenderer
        from aobench.scene.aobench_scene import create_single_sphere_scene

        scene, camera = create_single_sphere_scene()
        interrupted = AORenderer(scene, camera, small_config)
        gen = interrupted.render_progressive()
        next(gen)
        gen.close()
        assert interrupted.rows_done == 5

        scene.clear()
        scene.add_sphere((0.3, 0.2, 0.0), 0.4)
        scene.add_plane((0.0, -0.5, 0.0), (0.0, 1.0, 0.0))

        progress = list(interrupted.render_progressive())
        assert progress == [(5, 12), (10, 12), (12, 12)]

        reference = AORenderer(scene, camera, small_config).render()
        np.testing.assert_array_equal(interrupted.image, reference)


class TestAORendererReset:
    """Tests for reset and reproducibility."""

    def test_reset_clears_progress(self, renderer):
        renderer.render()
        renderer.reset()
        assert renderer.rows_done == 0
        assert not renderer.is_complete
        assert renderer.elapsed == 0.0

    def test_rerender_is_identical(self, renderer):
        first = renderer.render().copy()
        renderer.reset()
        second = renderer.render()
        np.testing.assert_array_equal(first, second)

    def test_row_block_does_not_change_image(self, small_config):
        from aobench.core.renderer import AORenderer
        from aobench.scene.aobench_scene import create_single_sphere_scene

        scene, camera = create_single_sphere_scene()
        a = AORenderer(scene, camera, replace(small_config, row_block=1)).render().copy()
        b = AORenderer(scene, camera, replace(small_config, row_block=100)).render()
        np.testing.assert_array_equal(a, b)

    def test_different_seeds_differ(self, small_config):
        from aobench.core.renderer import AORenderer
        from aobench.scene.aobench_scene import create_single_sphere_scene

        scene, camera = create_single_sphere_scene()
        a = AORenderer(scene, camera, replace(small_config, seed=1)).render().copy()
        b = AORenderer(scene, camera, replace(small_config, seed=2)).render()
        assert not np.array_equal(a, b)


class TestRenderImage:
    """Tests for the render_image convenience function."""

    def test_matches_renderer(self, small_config):
        from aobench.core.renderer import AORenderer, render_image
        from aobench.scene.aobench_scene import create_single_sphere_scene

        scene, camera = create_single_sphere_scene()
        a = render_image(small_config, scene, camera).copy()
        b = AORenderer(scene, camera, small_config).render(serial=True)
        np.testing.assert_array_equal(a, b)

"""Pytest configuration for the ambient occlusion tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_scene_data():
    """Clear scene data before and after each test.

    Primitive storage is global, so this keeps tests isolated.
    """
    # Import here so Taichi is initialized before the fields are created
    from aobench.scene.intersection import clear_scene

    clear_scene()
    yield
    clear_scene()


@pytest.fixture
def fresh_scene():
    """Create an empty SceneManager."""
    from aobench.scene.manager import SceneManager

    return SceneManager()


@pytest.fixture
def small_config():
    """A cheap render configuration for kernel-level tests."""
    from aobench.config import RenderConfig

    return RenderConfig(width=16, height=12, subsamples=1, ao_samples=2, seed=3, row_block=5)

"""Pytest configuration for renderer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the module-level fields of already imported modules.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_scene_data():
    """Clear sphere and material storage around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized first
    from bounce.materials.registry import clear_materials
    from bounce.scene.world import clear_spheres

    clear_spheres()
    clear_materials()

    yield

    clear_spheres()
    clear_materials()

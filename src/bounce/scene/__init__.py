"""Scene management module.

This module provides the world (composite scene) and ready-made scenes:

Components:
    world: Sphere storage, nearest-hit scan and the World builder
    presets: Literal and seeded-random demo scenes

The world stores spheres in Taichi fields, so this package must be imported
after ti.init().
"""

from .presets import (
    SCENES,
    empty_scene,
    random_scene,
    showcase_scene,
    single_sphere_scene,
)
from .world import (
    MAX_SPHERES,
    HitInfo,
    MaterialInfo,
    SceneConfig,
    SphereInfo,
    SphereSpec,
    World,
    clear_spheres,
    get_sphere_count,
    get_storage_generation,
    hit_world,
    load_world,
    material_from_config,
    material_to_config,
    save_world,
)

__all__ = [
    "World",
    "HitInfo",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "SphereSpec",
    "load_world",
    "save_world",
    "MAX_SPHERES",
    "hit_world",
    "clear_spheres",
    "get_sphere_count",
    "get_storage_generation",
    "material_to_config",
    "material_from_config",
    "SCENES",
    "empty_scene",
    "single_sphere_scene",
    "showcase_scene",
    "random_scene",
]

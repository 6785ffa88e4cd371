"""Ready-made scenes.

Each builder fills a fresh World and returns it. Random scenes are drawn
from a seeded NumPy generator, so the same seed always produces the same
scene.
"""

import logging

import numpy as np

from bounce.materials.lambertian import Lambertian
from bounce.materials.metal import Metal
from bounce.materials.palette import (
    CONCRETE,
    COPPER,
    GLASS,
    GROUND,
    PALETTE,
    RED_PLASTIC,
    SILVER,
)
from bounce.scene.world import World

logger = logging.getLogger(__name__)

# Radius of the sphere standing in for the ground plane
GROUND_RADIUS = 100.0


def empty_scene() -> World:
    """A world with nothing in it; every ray sees the sky."""
    return World()


def single_sphere_scene() -> World:
    """One diffuse sphere of radius 0.5 at (0, 0, -1)."""
    world = World()
    world.add_sphere((0.0, 0.0, -1.0), 0.5, CONCRETE)
    return world


def showcase_scene() -> World:
    """A row of spheres, one per material kind, on a large ground sphere.

    Laid out for a camera at the origin looking down -z.
    """
    world = World()
    world.add_sphere((0.0, -GROUND_RADIUS - 0.5, -1.0), GROUND_RADIUS, GROUND)
    world.add_sphere((0.0, 0.0, -1.2), 0.5, RED_PLASTIC)
    world.add_sphere((-1.0, 0.0, -1.0), 0.5, GLASS)
    world.add_sphere((1.0, 0.0, -1.0), 0.5, COPPER)
    world.add_sphere((0.0, -0.35, -0.6), 0.15, SILVER)
    return world


def random_scene(seed: int = 0, count: int = 100) -> World:
    """Scatter small spheres with random materials over the ground.

    Each sphere gets a random center in a square patch in front of the
    camera, a random radius and either a palette material or a freshly drawn
    diffuse/metal color.

    Args:
        seed: Seed for the NumPy generator.
        count: Number of random spheres (the ground sphere is extra).

    Returns:
        The populated World.

    Raises:
        ValueError: If count is negative.
    """
    if count < 0:
        raise ValueError(f"Sphere count must be non-negative, got {count}")

    rng = np.random.default_rng(seed)
    palette = list(PALETTE.values())

    world = World()
    world.add_sphere((0.0, -GROUND_RADIUS, 0.0), GROUND_RADIUS, GROUND)

    for _ in range(count):
        radius = float(rng.uniform(0.1, 0.4))
        center = (
            float(rng.uniform(-6.0, 6.0)),
            radius,
            float(rng.uniform(-8.0, 2.0)),
        )
        choice = rng.random()
        if choice < 0.5:
            material = palette[int(rng.integers(len(palette)))]
        elif choice < 0.8:
            material = Lambertian(albedo=tuple(float(c) for c in rng.random(3) ** 2))
        else:
            material = Metal(albedo=tuple(float(c) for c in rng.uniform(0.5, 1.0, 3)))
        world.add_sphere(center, radius, material)

    logger.debug(
        "Random scene: %d spheres, %d materials (seed=%d)",
        len(world),
        len(world.materials),
        seed,
    )
    return world


SCENES = {
    "empty": empty_scene,
    "single": single_sphere_scene,
    "showcase": showcase_scene,
    "random": random_scene,
}

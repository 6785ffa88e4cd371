"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector utilities and random direction sampling
    interval: Interval bounds for intersection windows and clamping
    rng: Per-row random number generator threaded through sampling calls
    integrator: Path integration and the row-parallel render kernel

The integrator estimates radiance by following each camera ray through its
bounces until it escapes to the sky, is absorbed, or runs out of depth.
"""

from .interval import (
    UNIVERSE,
    Interval,
    clamp,
    contains,
    interval_clamp,
    interval_surrounds,
    make_interval,
    surrounds,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_on_hemisphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    vec3,
)
from .rng import next_u32, random_float, random_range, seed_row

# Note: integrator is NOT imported here because it declares Taichi fields
# (through the camera, scene and material modules) and must be imported only
# after ti.init(). Import it directly from bounce.core.integrator.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_on_hemisphere",
    "random_in_unit_disk",
    "Interval",
    "make_interval",
    "interval_surrounds",
    "interval_clamp",
    "UNIVERSE",
    "contains",
    "surrounds",
    "clamp",
    "seed_row",
    "next_u32",
    "random_float",
    "random_range",
]

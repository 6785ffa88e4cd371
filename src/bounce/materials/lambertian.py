"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters the incoming ray toward ``normal + u`` where ``u``
is a uniformly distributed unit vector. The resulting directions follow a
cosine-weighted distribution around the normal, so the attenuation is just
the albedo.

Example:
    >>> from bounce.materials.lambertian import Lambertian
    >>> clay = Lambertian(albedo=(0.8, 0.3, 0.3))
    >>> # world.add_sphere((0, 0, -1), 0.5, clay)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from bounce.core.ray import near_zero, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Lambertian:
    """Diffuse material description.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))


def validate_albedo(albedo: tuple[float, float, float]) -> tuple[float, float, float]:
    """Check that an albedo is an RGB triple with components in [0, 1].

    Returns:
        The albedo as a tuple of floats.

    Raises:
        ValueError: If the albedo does not have three components or any
            component is outside [0, 1].
    """
    values = tuple(float(component) for component in albedo)
    if len(values) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(values)}")
    for i, component in enumerate(values):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return values  # type: ignore[return-value]


@ti.func
def lambertian_direction(normal: vec3, unit: vec3) -> vec3:
    """Diffuse scatter direction for a sampled unit vector.

    Returns normal + unit, or the normal itself when the sum is degenerate
    (the unit vector nearly cancels the normal).
    """
    direction = normal + unit
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Sample a scattered direction for a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal at the hit point.
        state: The caller's generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state).
        Diffuse surfaces always scatter.
    """
    unit, s = random_unit_vector(state)
    return lambertian_direction(normal, unit), albedo, 1, s

"""Metal (specular reflective) material implementation.

A metal surface mirrors the incoming direction about the normal and tints
the reflected light by its albedo. Surfaces are perfect mirrors; there is no
fuzz/roughness term.
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from bounce.core.ray import reflect
from bounce.materials.lambertian import validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Metal:
    """Mirror material description.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))


@ti.func
def scatter_metal(albedo: vec3, incident_direction: vec3, normal: vec3):
    """Reflect the incoming ray about the surface normal.

    The angle between the scattered direction and the normal equals the angle
    of incidence, and both directions lie in the plane spanned by the
    incident direction and the normal.

    Args:
        albedo: The reflective color (RGB).
        incident_direction: The incoming ray direction.
        normal: The unit surface normal.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Metals
        always scatter.
    """
    scattered_direction = reflect(incident_direction, normal)
    return scattered_direction, albedo, 1

"""Dielectric (glass/water) material implementation.

This module implements clear refractive materials.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1

The choice between reflection and refraction is a hard cutoff: the ray is
reflected exactly when refraction is impossible and refracted otherwise.
There is no Fresnel (Schlick) blending, so the material is deterministic.

Example:
    >>> from bounce.materials.dielectric import Dielectric
    >>> glass = Dielectric(ior=1.5)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from bounce.core.ray import reflect, refract

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Dielectric:
    """Refractive material description.

    Attributes:
        ior: Index of refraction. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    ior: float

    def __post_init__(self) -> None:
        ior = float(self.ior)
        if not ior > 0.0:
            raise ValueError(f"Index of refraction must be positive, got {ior}")
        object.__setattr__(self, "ior", ior)


@ti.func
def refraction_ratio(ior: ti.f64, front_face: ti.i32) -> ti.f64:
    """Ratio n_incident / n_transmitted for a hit.

    Entering from outside (front face) the ray goes air -> material, so the
    ratio is 1 / ior; leaving the material it is ior.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def will_reflect(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine if total internal reflection will occur.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing against the ray.
        front_face: 1 if the ray hits the outside of the surface.

    Returns:
        1 if refraction is impossible, 0 otherwise.
    """
    ratio = refraction_ratio(ior, front_face)
    unit_direction = tm.normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))
    return ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing against the ray.
        front_face: 1 if the ray hits the outside of the surface,
            0 if the ray is inside the material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted unit direction.
        - attenuation: White; the material does not absorb.
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio(ior, front_face)
    unit_direction = tm.normalize(incident_direction)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if will_reflect(ior, incident_direction, normal, front_face):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, 1

"""Materials module for light scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Perfect mirror reflection
    dielectric: Clear refractive materials (glass, water)
    palette: Named, shared material descriptions
    registry: Material storage and scatter dispatch for the render kernel

Each scatter function is a Taichi function returning the scattered
direction, the color attenuation and whether the ray survived.
"""

from .dielectric import Dielectric, refraction_ratio, scatter_dielectric, will_reflect
from .lambertian import Lambertian, lambertian_direction, scatter_lambertian, validate_albedo
from .metal import Metal, scatter_metal
from .palette import (
    CONCRETE,
    COPPER,
    GLASS,
    GROUND,
    PALETTE,
    RED_PLASTIC,
    SILVER,
    WATER,
)

# Note: registry is NOT imported here because it declares Taichi fields and
# must be imported after ti.init(). Import it from bounce.materials.registry.

__all__ = [
    "Lambertian",
    "lambertian_direction",
    "scatter_lambertian",
    "validate_albedo",
    "Metal",
    "scatter_metal",
    "Dielectric",
    "scatter_dielectric",
    "refraction_ratio",
    "will_reflect",
    "PALETTE",
    "CONCRETE",
    "GROUND",
    "RED_PLASTIC",
    "COPPER",
    "SILVER",
    "GLASS",
    "WATER",
]

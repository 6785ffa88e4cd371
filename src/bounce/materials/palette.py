"""Named materials shared across scenes.

These are immutable descriptions; a World registers each one once and every
sphere that uses it refers to the same registry entry.
"""

from bounce.materials.dielectric import Dielectric
from bounce.materials.lambertian import Lambertian
from bounce.materials.metal import Metal

CONCRETE = Lambertian(albedo=(0.5, 0.5, 0.5))
GROUND = Lambertian(albedo=(0.8, 0.8, 0.0))
RED_PLASTIC = Lambertian(albedo=(0.9, 0.1, 0.1))
COPPER = Metal(albedo=(0.7, 0.5, 0.3))
SILVER = Metal(albedo=(0.9, 0.9, 0.9))
GLASS = Dielectric(ior=1.5)
WATER = Dielectric(ior=1.33)

PALETTE = {
    "concrete": CONCRETE,
    "ground": GROUND,
    "red_plastic": RED_PLASTIC,
    "copper": COPPER,
    "silver": SILVER,
    "glass": GLASS,
    "water": WATER,
}

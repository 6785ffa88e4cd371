"""Material registry and scatter dispatch.

Materials form a small closed set, so each registered material is stored as
a tagged record: a MaterialType tag plus the parameters of that variant
(albedo for diffuse and metal, index of refraction for dielectrics). The
render kernel dispatches on the tag; spheres refer to materials by id, so a
material shared by many spheres is stored once.

The registry is written only from Python scope while a scene is built and is
read-only inside the render kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from bounce.materials.registry import register_material
    >>> from bounce.materials.palette import COPPER
    >>> copper_id = register_material(COPPER)
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from bounce.core.ray import Ray
from bounce.geometry.sphere import HitRecord
from bounce.materials.dielectric import Dielectric, scatter_dielectric
from bounce.materials.lambertian import Lambertian, scatter_lambertian
from bounce.materials.metal import Metal, scatter_metal

# Type alias for 3D vectors
vec3 = tm.vec3

MaterialSpec = Lambertian | Metal | Dielectric


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of distinct materials in a scene
MAX_MATERIALS = 1024

# material_types[i] stores the MaterialType tag for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# Diffuse and metal albedo
material_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
# Dielectric index of refraction
material_iors = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def material_type_of(material: MaterialSpec) -> MaterialType:
    """Return the dispatch tag for a material description.

    Raises:
        TypeError: If material is not a Lambertian, Metal or Dielectric.
    """
    if isinstance(material, Lambertian):
        return MaterialType.LAMBERTIAN
    if isinstance(material, Metal):
        return MaterialType.METAL
    if isinstance(material, Dielectric):
        return MaterialType.DIELECTRIC
    raise TypeError(f"Unsupported material: {material!r}")


def clear_materials() -> None:
    """Clear all registered materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def register_material(material: MaterialSpec) -> int:
    """Add a material to the registry.

    Args:
        material: The material description.

    Returns:
        The material id to store on spheres.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        TypeError: If material is not a supported description.
    """
    material_type = material_type_of(material)

    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_types[material_id] = int(material_type)
    if material_type == MaterialType.DIELECTRIC:
        material_albedos[material_id] = [1.0, 1.0, 1.0]
        material_iors[material_id] = material.ior
    else:
        material_albedos[material_id] = list(material.albedo)
        material_iors[material_id] = 1.0
    num_materials[None] = material_id + 1
    return material_id


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the MaterialType tag of a material id.

    Returns:
        The tag as an integer, or -1 for an unknown id.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def scatter(ray: Ray, rec: HitRecord, state: ti.u32):
    """Dispatch to the scatter function of the hit material.

    An unknown material id absorbs the ray.

    Args:
        ray: The incoming ray.
        rec: The hit record of the intersection.
        state: The caller's generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_ray, new_state). The
        scattered ray starts at the hit point. When did_scatter is 0 the ray
        was absorbed and the other values are meaningless.
    """
    material_id = rec.material_id
    mat_type = get_material_type(material_id)

    # Default values
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    s = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter, s = scatter_lambertian(
            material_albedos[material_id], rec.normal, s
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal(
            material_albedos[material_id], ray.direction, rec.normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            material_iors[material_id], ray.direction, rec.normal, rec.front_face
        )

    scattered = Ray(origin=rec.point, direction=scattered_direction)
    return did_scatter, attenuation, scattered, s
